"""Value objects exchanged with circuit breaker callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from .config import CircuitState

T = TypeVar("T")


class FailureKind(Enum):
    """Why an execute() call did not produce a primary result."""

    OPERATION_FAILED = "operation_failed"
    CIRCUIT_OPEN = "circuit_open"
    FALLBACK_FAILED = "fallback_failed"


@dataclass(frozen=True)
class CircuitContext:
    """Context describing the call that triggered a fallback.

    Attributes:
        operation: Caller-supplied operation name.
        service: Service the breaker guards.
        timestamp: Epoch seconds when the call started.
        attempt_number: Failure count at call time plus one.
        metadata: Optional caller-supplied details.
    """

    operation: str
    service: str
    timestamp: float
    attempt_number: int
    metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "service": self.service,
            "timestamp": self.timestamp,
            "attempt_number": self.attempt_number,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class CircuitBreakerResult(Generic[T]):
    """Outcome of a guarded call. execute() always returns one of these.

    Attributes:
        success: True when the primary operation or a fallback produced data.
        data: The produced value, None on failure.
        error: Error message, set only when success is False.
        from_cache: True when a fallback answered instead of the operation.
        circuit_state: Breaker state after this call.
        failure: Category of the failure, None for primary successes.
    """

    success: bool
    circuit_state: CircuitState
    data: T | None = None
    error: str | None = None
    from_cache: bool = False
    failure: FailureKind | None = None


@dataclass(frozen=True)
class CircuitBreakerMetrics:
    """Read-only snapshot of a breaker.

    Timestamps are epoch seconds. next_retry_at is only set while open.
    total_requests never decreases.
    """

    service_name: str
    state: CircuitState
    failure_count: int
    success_count: int
    total_requests: int
    last_failure_at: float | None = None
    last_success_at: float | None = None
    next_retry_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_name": self.service_name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "total_requests": self.total_requests,
            "last_failure_at": _iso(self.last_failure_at),
            "last_success_at": _iso(self.last_success_at),
            "next_retry_at": _iso(self.next_retry_at),
        }


FallbackHandler = Callable[[BaseException, CircuitContext], Union[Any, Awaitable[Any]]]


def _iso(timestamp: float | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
