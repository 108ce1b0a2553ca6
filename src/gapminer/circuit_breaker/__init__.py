"""Circuit breaker implementation for GapMiner.

Implements the circuit breaker pattern per external service to stop
calling a failing dependency for a cool-down period.

The circuit breaker has three states:
- CLOSED: Normal operation, failures are counted
- OPEN: Circuit tripped, calls are answered by the fallback or rejected
- HALF_OPEN: Testing recovery, real attempts allowed
"""

from .breaker import ServiceCircuitBreaker
from .config import (
    DEFAULT_CONFIG,
    SERVICE_DEFAULTS,
    CircuitBreakerConfig,
    CircuitState,
    config_for_service,
)
from .exceptions import CircuitBreakerError, CircuitConfigError, CircuitOpenError, FallbackError
from .fallbacks import (
    DEFAULT_FALLBACKS,
    firecrawl_fallback,
    firestore_fallback,
    gemini_fallback,
    install_default_fallbacks,
)
from .models import (
    CircuitBreakerMetrics,
    CircuitBreakerResult,
    CircuitContext,
    FailureKind,
    FallbackHandler,
)
from .registry import CircuitBreakerRegistry, get_registry, reset_registry, set_registry

__all__ = [
    "CircuitBreakerConfig",
    "CircuitBreakerError",
    "CircuitBreakerMetrics",
    "CircuitBreakerRegistry",
    "CircuitBreakerResult",
    "CircuitConfigError",
    "CircuitContext",
    "CircuitOpenError",
    "CircuitState",
    "DEFAULT_CONFIG",
    "DEFAULT_FALLBACKS",
    "FailureKind",
    "FallbackError",
    "FallbackHandler",
    "SERVICE_DEFAULTS",
    "ServiceCircuitBreaker",
    "config_for_service",
    "firecrawl_fallback",
    "firestore_fallback",
    "gemini_fallback",
    "get_registry",
    "install_default_fallbacks",
    "reset_registry",
    "set_registry",
]
