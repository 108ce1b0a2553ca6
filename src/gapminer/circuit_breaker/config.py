"""Circuit breaker configuration for GapMiner.

This module defines the circuit states and the per-service configuration
dataclass. Each external service (LLM, crawler, database) gets its own
breaker, and each service has tuned defaults layered over a global default.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .exceptions import CircuitConfigError


class CircuitState(Enum):
    """Possible states for a circuit breaker."""

    CLOSED = "closed"  # Normal operation - requests allowed
    OPEN = "open"  # Circuit tripped - requests answered without calling out
    HALF_OPEN = "half-open"  # Testing recovery - real attempts allowed


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for a single service circuit breaker.

    Attributes:
        failure_threshold: Failures inside the monitoring window before opening.
        success_threshold: Successes needed in half-open before closing.
        timeout_seconds: Time the circuit stays open before a retry is allowed.
        monitoring_window_seconds: Closed-state failures older than this are forgotten.
        call_timeout_seconds: Optional deadline per call. Expiry counts as a failure.
    """

    failure_threshold: int = 5
    success_threshold: int = 2
    timeout_seconds: float = 30.0
    monitoring_window_seconds: float = 60.0
    call_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise CircuitConfigError(
                f"failure_threshold must be >= 1, got {self.failure_threshold}"
            )
        if self.success_threshold < 1:
            raise CircuitConfigError(
                f"success_threshold must be >= 1, got {self.success_threshold}"
            )
        if self.timeout_seconds <= 0:
            raise CircuitConfigError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.monitoring_window_seconds <= 0:
            raise CircuitConfigError(
                f"monitoring_window_seconds must be > 0, got {self.monitoring_window_seconds}"
            )
        if self.call_timeout_seconds is not None and self.call_timeout_seconds <= 0:
            raise CircuitConfigError(
                f"call_timeout_seconds must be > 0 when set, got {self.call_timeout_seconds}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return {
            "failure_threshold": self.failure_threshold,
            "success_threshold": self.success_threshold,
            "timeout_seconds": self.timeout_seconds,
            "monitoring_window_seconds": self.monitoring_window_seconds,
            "call_timeout_seconds": self.call_timeout_seconds,
        }


# Default configuration instance for convenience
DEFAULT_CONFIG = CircuitBreakerConfig()

# Service-specific overrides applied on top of DEFAULT_CONFIG.
# LLM calls are slow and expensive, so they trip early and cool down longer.
SERVICE_DEFAULTS: dict[str, dict[str, Any]] = {
    "gemini-api": {"failure_threshold": 3, "timeout_seconds": 60.0},
    "firecrawl-api": {"failure_threshold": 5, "timeout_seconds": 30.0},
    "firestore": {"failure_threshold": 10, "timeout_seconds": 10.0},
}


def config_for_service(service_name: str, **overrides: Any) -> CircuitBreakerConfig:
    """Resolve the configuration for a service.

    Precedence (lowest to highest): DEFAULT_CONFIG, SERVICE_DEFAULTS entry
    for the service, explicit keyword overrides.

    Args:
        service_name: Name of the external service (e.g. "gemini-api").
        **overrides: Field values that take precedence over the defaults.

    Returns:
        Resolved CircuitBreakerConfig.

    Raises:
        CircuitConfigError: If the resolved values violate config invariants.
        TypeError: If an override names an unknown field.
    """
    fields = {**SERVICE_DEFAULTS.get(service_name, {}), **overrides}
    return replace(DEFAULT_CONFIG, **fields)
