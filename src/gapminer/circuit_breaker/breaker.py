"""Service-level circuit breaker implementation.

Guards one external dependency (LLM endpoint, crawler, database) from
cascading failures by counting failures, opening the circuit when a
threshold is reached, and answering blocked calls from a fallback.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from .config import CircuitBreakerConfig, CircuitState, config_for_service
from .exceptions import CircuitOpenError
from .models import (
    CircuitBreakerMetrics,
    CircuitBreakerResult,
    CircuitContext,
    FailureKind,
    FallbackHandler,
)
from .transitions import (
    BreakerStatus,
    admit,
    closed_status,
    on_failure,
    on_success,
    trip,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceCircuitBreaker:
    """Circuit breaker for a single named external service.

    execute() never raises for operation, timeout or fallback errors; every
    outcome is reported through a CircuitBreakerResult. The breaker does not
    retry operations itself; it only decides whether an attempt is allowed.

    Usage:
        breaker = ServiceCircuitBreaker("gemini-api")
        breaker.set_fallback(gemini_fallback)

        result = await breaker.execute(lambda: client.send_message(prompt))
        if result.success and not result.from_cache:
            text = result.data

    Attributes:
        service_name: Name of the guarded service.
        config: Circuit breaker configuration.
        state: Current circuit state.
    """

    def __init__(
        self,
        service_name: str,
        config: CircuitBreakerConfig | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the circuit breaker.

        Args:
            service_name: Name of the external service.
            config: Configuration settings. Resolved from the service defaults if None.
            clock: Source of epoch seconds. Defaults to time.time.
        """
        self._service_name = service_name
        self._config = config or config_for_service(service_name)
        self._clock = clock or time.time

        self._status: BreakerStatus = closed_status()
        self._total_requests = 0
        self._last_failure_at: float | None = None
        self._last_success_at: float | None = None
        self._fallback: FallbackHandler | None = None

        # Guards _status and the counters. Never held across an await.
        self._lock = threading.Lock()

    @property
    def service_name(self) -> str:
        """Return the guarded service name."""
        return self._service_name

    @property
    def config(self) -> CircuitBreakerConfig:
        """Return the breaker configuration."""
        return self._config

    @property
    def state(self) -> CircuitState:
        """Return the current circuit state."""
        return self._status.state

    @property
    def has_fallback(self) -> bool:
        """Check whether a fallback handler is registered."""
        return self._fallback is not None

    def get_state(self) -> CircuitState:
        """Return the current circuit state."""
        return self._status.state

    def set_fallback(self, handler: FallbackHandler | None) -> None:
        """Register the fallback handler, replacing any previous one.

        The handler receives the triggering error and a CircuitContext and
        returns a substitute value, either directly or as an awaitable. It
        may raise (FallbackError by convention) when it cannot help.
        """
        self._fallback = handler

    def get_time_until_retry(self) -> float:
        """Get seconds until an open circuit admits another attempt."""
        status = self._status
        if status.state != CircuitState.OPEN or status.next_retry_at is None:
            return 0.0
        return max(0.0, status.next_retry_at - self._clock())

    def get_metrics(self) -> CircuitBreakerMetrics:
        """Return a snapshot of the breaker's counters and state."""
        with self._lock:
            status = self._status
            return CircuitBreakerMetrics(
                service_name=self._service_name,
                state=status.state,
                failure_count=status.failure_count,
                success_count=status.success_count,
                total_requests=self._total_requests,
                last_failure_at=self._last_failure_at,
                last_success_at=self._last_success_at,
                next_retry_at=(
                    status.next_retry_at if status.state == CircuitState.OPEN else None
                ),
            )

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        operation_name: str = "unknown",
        metadata: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> CircuitBreakerResult[T]:
        """Run an operation through the circuit.

        Args:
            operation: Zero-argument callable returning an awaitable.
            operation_name: Name reported to fallbacks in the CircuitContext.
            metadata: Extra details reported to fallbacks.
            timeout: Per-call deadline in seconds. Overrides
                config.call_timeout_seconds. Expiry counts as a failure.

        Returns:
            CircuitBreakerResult describing the outcome.
        """
        with self._lock:
            now = self._clock()
            self._total_requests += 1
            context = CircuitContext(
                operation=operation_name,
                service=self._service_name,
                timestamp=now,
                attempt_number=self._status.failure_count + 1,
                metadata=metadata,
            )
            handler = self._fallback
            previous_state = self._status.state
            self._status = admit(self._status, now)
            blocked = self._status.state == CircuitState.OPEN

        if previous_state == CircuitState.OPEN and not blocked:
            logger.info("Circuit %s entering HALF_OPEN for recovery test", self._service_name)

        if blocked:
            return await self._answer_while_open(handler, context)

        deadline = timeout if timeout is not None else self._config.call_timeout_seconds
        try:
            if deadline is None:
                data = await operation()
            else:
                data = await asyncio.wait_for(operation(), timeout=deadline)
        except asyncio.CancelledError:
            self._record_failure("operation cancelled")
            raise
        except Exception as e:
            error: BaseException = e
            if isinstance(e, TimeoutError) and deadline is not None:
                error = TimeoutError(f"Operation timed out after {deadline:g}s")
            self._record_failure(_describe(error))
            return await self._answer_after_failure(handler, error, context)

        state = self._record_success()
        return CircuitBreakerResult(success=True, data=data, circuit_state=state)

    def force_open(self) -> None:
        """Manually open the circuit and restart the retry timer."""
        with self._lock:
            self._status = trip(self._status, self._config, self._clock())
        logger.warning("Circuit %s manually OPENED", self._service_name)

    def force_close(self) -> None:
        """Manually close the circuit, clearing counts but not total_requests."""
        with self._lock:
            from_state = self._status.state
            self._status = closed_status()
        if from_state != CircuitState.CLOSED:
            logger.info(
                "Circuit %s manually reset to CLOSED (was %s)",
                self._service_name,
                from_state.value,
            )

    def _record_success(self) -> CircuitState:
        with self._lock:
            from_state = self._status.state
            self._last_success_at = self._clock()
            self._status = on_success(self._status, self._config, self._last_success_at)
            state = self._status.state

        if from_state == CircuitState.HALF_OPEN and state == CircuitState.CLOSED:
            logger.info("Circuit %s CLOSED after successful recovery", self._service_name)
        else:
            logger.debug("Circuit %s success: state=%s", self._service_name, state.value)
        return state

    def _record_failure(self, reason: str) -> CircuitState:
        with self._lock:
            from_state = self._status.state
            self._last_failure_at = self._clock()
            self._status = on_failure(self._status, self._config, self._last_failure_at)
            state = self._status.state
            failures = self._status.failure_count

        logger.debug(
            "Circuit %s failure %d/%d: %s",
            self._service_name,
            failures,
            self._config.failure_threshold,
            reason,
        )
        if from_state == CircuitState.CLOSED and state == CircuitState.OPEN:
            logger.warning(
                "Circuit %s OPENED: %s (failures=%d)", self._service_name, reason, failures
            )
        elif from_state == CircuitState.HALF_OPEN:
            logger.warning(
                "Circuit %s reopened, recovery attempt failed: %s", self._service_name, reason
            )
        return state

    async def _answer_while_open(
        self, handler: FallbackHandler | None, context: CircuitContext
    ) -> CircuitBreakerResult[Any]:
        """Answer a blocked call from the fallback or with a synthetic failure."""
        time_until_retry = self.get_time_until_retry()
        if handler is not None:
            try:
                data = await _call_fallback(
                    handler, CircuitOpenError(self._service_name, time_until_retry), context
                )
            except Exception as e:
                logger.error("Fallback for %s failed while open: %s", self._service_name, e)
                return CircuitBreakerResult(
                    success=False,
                    error=f"Fallback failed: {_describe(e)}",
                    from_cache=True,
                    circuit_state=self.state,
                    failure=FailureKind.FALLBACK_FAILED,
                )
            return CircuitBreakerResult(
                success=True, data=data, from_cache=True, circuit_state=self.state
            )

        retry_at = datetime.fromtimestamp(
            self._clock() + time_until_retry, tz=timezone.utc
        ).isoformat()
        return CircuitBreakerResult(
            success=False,
            error=f"Circuit breaker is open for {self._service_name}. Retry after {retry_at}",
            circuit_state=self.state,
            failure=FailureKind.CIRCUIT_OPEN,
        )

    async def _answer_after_failure(
        self, handler: FallbackHandler | None, error: BaseException, context: CircuitContext
    ) -> CircuitBreakerResult[Any]:
        """Answer a failed call from the fallback or report the primary error."""
        if handler is not None:
            try:
                data = await _call_fallback(handler, error, context)
            except Exception as e:
                logger.error(
                    "Fallback for %s failed after primary error %s: %s",
                    self._service_name,
                    _describe(error),
                    e,
                )
                return CircuitBreakerResult(
                    success=False,
                    error=f"Primary and fallback both failed: {_describe(error)}",
                    circuit_state=self.state,
                    failure=FailureKind.FALLBACK_FAILED,
                )
            return CircuitBreakerResult(
                success=True, data=data, from_cache=True, circuit_state=self.state
            )

        return CircuitBreakerResult(
            success=False,
            error=_describe(error),
            circuit_state=self.state,
            failure=FailureKind.OPERATION_FAILED,
        )


async def _call_fallback(
    handler: FallbackHandler, error: BaseException, context: CircuitContext
) -> Any:
    """Invoke a fallback handler, awaiting its result when it is awaitable."""
    result = handler(error, context)
    if inspect.isawaitable(result):
        result = await result
    return result


def _describe(error: BaseException) -> str:
    """Return the error message, falling back to the exception type name."""
    return str(error) or type(error).__name__
