"""Circuit breaker exception classes."""

from __future__ import annotations


class CircuitBreakerError(Exception):
    """Base exception for circuit breaker errors."""

    pass


class CircuitOpenError(CircuitBreakerError):
    """Handed to fallbacks when the circuit is open and the call was blocked."""

    def __init__(self, service: str, time_until_retry: float) -> None:
        self.service = service
        self.time_until_retry = time_until_retry
        super().__init__(
            f"Circuit breaker is open for {service}. Retry in {time_until_retry:.1f}s"
        )


class CircuitConfigError(CircuitBreakerError, ValueError):
    """Raised at construction time for invalid circuit breaker settings."""

    pass


class FallbackError(CircuitBreakerError):
    """Raised by a fallback handler that cannot produce a substitute value."""

    pass
