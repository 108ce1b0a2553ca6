"""Circuit breaker registry for managing all service breakers.

Maps service names to ServiceCircuitBreaker instances, creating them
lazily on first use. A module-level default registry exists for the whole
process; tests and operators reset it through reset_registry().
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Mapping

from .breaker import ServiceCircuitBreaker
from .config import CircuitBreakerConfig, CircuitState, config_for_service
from .models import CircuitBreakerMetrics

logger = logging.getLogger(__name__)


class CircuitBreakerRegistry:
    """Central registry for service circuit breakers.

    get_breaker() is an atomic get-or-create: concurrent callers asking for
    the same service always receive the same instance. The configuration
    passed on the first call wins; later configurations are ignored until the
    breaker is removed.

    Usage:
        registry = CircuitBreakerRegistry()

        gemini = registry.get_breaker("gemini-api")
        result = await gemini.execute(call_llm)

        registry.get_all_metrics()
        registry.reset_all()

    Attributes:
        service_configs: Per-service configuration overrides.
    """

    def __init__(
        self,
        service_configs: Mapping[str, CircuitBreakerConfig] | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            service_configs: Configurations used when get_breaker() is called
                without one. Services not listed use config_for_service().
            clock: Clock passed to every breaker created by this registry.
        """
        self._service_configs = dict(service_configs or {})
        self._clock = clock
        self._breakers: dict[str, ServiceCircuitBreaker] = {}
        self._lock = threading.Lock()

    def __contains__(self, service_name: object) -> bool:
        return service_name in self._breakers

    def __len__(self) -> int:
        return len(self._breakers)

    def service_names(self) -> list[str]:
        """Return the names of all registered services, sorted."""
        with self._lock:
            return sorted(self._breakers)

    def resolve_config(self, service_name: str) -> CircuitBreakerConfig:
        """Return the configuration a new breaker for this service would get."""
        return self._service_configs.get(service_name) or config_for_service(service_name)

    def get_breaker(
        self,
        service_name: str,
        config: CircuitBreakerConfig | None = None,
    ) -> ServiceCircuitBreaker:
        """Get or create the breaker for a service.

        Args:
            service_name: Name of the external service.
            config: Configuration for a newly created breaker. Ignored when
                the breaker already exists.

        Returns:
            The ServiceCircuitBreaker for this service.
        """
        with self._lock:
            breaker = self._breakers.get(service_name)
            if breaker is None:
                breaker = ServiceCircuitBreaker(
                    service_name,
                    config or self.resolve_config(service_name),
                    clock=self._clock,
                )
                self._breakers[service_name] = breaker
                logger.debug("Created circuit breaker: %s", service_name)
            elif config is not None and config != breaker.config:
                logger.debug(
                    "Ignoring new config for existing circuit breaker %s", service_name
                )
            return breaker

    def get(self, service_name: str) -> ServiceCircuitBreaker | None:
        """Return the breaker for a service without creating it."""
        with self._lock:
            return self._breakers.get(service_name)

    def remove_breaker(self, service_name: str) -> bool:
        """Remove a breaker so the next get_breaker() creates a fresh one.

        Returns:
            True if a breaker was removed.
        """
        with self._lock:
            removed = self._breakers.pop(service_name, None) is not None
        if removed:
            logger.debug("Removed circuit breaker: %s", service_name)
        return removed

    def get_all_metrics(self) -> dict[str, CircuitBreakerMetrics]:
        """Return a metrics snapshot for every registered breaker."""
        with self._lock:
            breakers = list(self._breakers.items())
        return {name: breaker.get_metrics() for name, breaker in breakers}

    def get_open_services(self) -> list[str]:
        """Return services whose circuit is OPEN or HALF_OPEN."""
        with self._lock:
            breakers = list(self._breakers.items())
        return sorted(name for name, b in breakers if b.state != CircuitState.CLOSED)

    def reset_all(self) -> int:
        """Force-close every registered breaker.

        Administrative function for recovery from widespread issues and for
        test isolation.

        Returns:
            Number of breakers that were not closed before the reset.
        """
        with self._lock:
            breakers = list(self._breakers.values())

        reset_count = 0
        for breaker in breakers:
            if breaker.state != CircuitState.CLOSED:
                reset_count += 1
            breaker.force_close()

        logger.info("Reset %d circuits via registry.reset_all()", reset_count)
        return reset_count


# Process-wide default registry
_registry: CircuitBreakerRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> CircuitBreakerRegistry:
    """Get the process-wide registry, creating it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = CircuitBreakerRegistry()
        return _registry


def set_registry(registry: CircuitBreakerRegistry) -> None:
    """Replace the process-wide registry (e.g. one built from settings)."""
    global _registry
    with _registry_lock:
        _registry = registry


def reset_registry() -> None:
    """Drop the process-wide registry. The next get_registry() starts empty."""
    global _registry
    with _registry_lock:
        _registry = None
