"""Pure state transitions for the service circuit breaker.

The breaker keeps its mutable bookkeeping in a single immutable
BreakerStatus value and replaces it with the result of these functions.
None of them perform I/O, logging or clock reads; ``now`` is always passed in.

State machine:
    CLOSED    --failure_threshold failures in window-->  OPEN
    OPEN      --now >= next_retry_at (on admit)------->  HALF_OPEN
    HALF_OPEN --success_threshold successes----------->  CLOSED
    HALF_OPEN --any failure--------------------------->  OPEN (timer reset)
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .config import CircuitBreakerConfig, CircuitState


@dataclass(frozen=True)
class BreakerStatus:
    """Mutable-state snapshot of a breaker, as an immutable value.

    Attributes:
        state: Current circuit state.
        failure_count: Failures counted towards the threshold.
        success_count: Successes since the last transition.
        next_retry_at: Epoch seconds when an open circuit admits a retry.
        failure_times: Timestamps of counted failures while closed.
    """

    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    next_retry_at: float | None = None
    failure_times: tuple[float, ...] = ()


def closed_status() -> BreakerStatus:
    """Return a fresh closed status with all counters cleared."""
    return BreakerStatus()


def trip(status: BreakerStatus, config: CircuitBreakerConfig, now: float) -> BreakerStatus:
    """Open the circuit and schedule the next retry."""
    return replace(
        status,
        state=CircuitState.OPEN,
        success_count=0,
        next_retry_at=now + config.timeout_seconds,
        failure_times=(),
    )


def admit(status: BreakerStatus, now: float) -> BreakerStatus:
    """Move an open circuit to half-open once its retry deadline has passed.

    Returns the status unchanged when the circuit is not open or the
    deadline is still in the future.
    """
    if status.state != CircuitState.OPEN:
        return status
    if status.next_retry_at is not None and now < status.next_retry_at:
        return status
    return replace(status, state=CircuitState.HALF_OPEN, success_count=0)


def on_success(
    status: BreakerStatus, config: CircuitBreakerConfig, now: float
) -> BreakerStatus:
    """Apply a successful operation to the status."""
    if status.state == CircuitState.HALF_OPEN:
        successes = status.success_count + 1
        if successes >= config.success_threshold:
            return closed_status()
        return replace(status, success_count=successes)

    if status.state == CircuitState.CLOSED:
        # Consecutive mode: a success clears the failure streak
        return replace(
            status,
            failure_count=0,
            failure_times=(),
            success_count=status.success_count + 1,
        )

    # A call admitted before a forced open finished successfully; stay open
    return status


def on_failure(
    status: BreakerStatus, config: CircuitBreakerConfig, now: float
) -> BreakerStatus:
    """Apply a failed operation to the status."""
    if status.state == CircuitState.HALF_OPEN:
        # Any failure while probing reopens, whatever the success count
        return trip(replace(status, failure_count=status.failure_count + 1), config, now)

    if status.state == CircuitState.OPEN:
        return replace(status, failure_count=status.failure_count + 1)

    window_start = now - config.monitoring_window_seconds
    recent = tuple(t for t in status.failure_times if t >= window_start) + (now,)
    updated = replace(status, failure_count=len(recent), failure_times=recent)
    if updated.failure_count >= config.failure_threshold:
        return trip(updated, config, now)
    return updated
