"""Health check router.

The overall status follows the circuit breakers:
- healthy: every circuit is closed
- degraded: some circuit is open or half-open, but every open one has a fallback
- unhealthy: an open circuit has no fallback, so its callers get errors
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from gapminer.api.dependencies import get_registry_dep
from gapminer.api.models import CircuitResponse, HealthResponse
from gapminer.circuit_breaker import CircuitBreakerRegistry, CircuitState

logger = logging.getLogger(__name__)

router = APIRouter()


def compute_health(registry: CircuitBreakerRegistry) -> HealthResponse:
    """Summarize registry state into a HealthResponse."""
    metrics = registry.get_all_metrics()
    open_services = registry.get_open_services()

    unavailable = []
    for name in open_services:
        breaker = registry.get(name)
        if breaker is not None and breaker.state == CircuitState.OPEN and not breaker.has_fallback:
            unavailable.append(name)

    if unavailable:
        status = "unhealthy"
    elif open_services:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        circuits=[CircuitResponse.from_metrics(metrics[name]) for name in sorted(metrics)],
        open_services=open_services,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        details={"unavailable_services": unavailable} if unavailable else None,
    )


@router.get("", response_model=HealthResponse)
def get_health(
    response: Response,
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> HealthResponse:
    """Return health status including circuit breaker information.

    Status code is 200 for healthy/degraded, 503 for unhealthy.
    """
    health = compute_health(registry)
    if health.status == "unhealthy":
        logger.warning("Health check unhealthy: %s", ", ".join(health.open_services))
        response.status_code = 503
    return health


@router.get("/live")
def get_health_live() -> dict[str, str]:
    """Return liveness status."""
    return {"status": "alive"}
