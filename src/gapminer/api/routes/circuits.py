"""Circuit breaker endpoints.

Endpoints:
- GET /circuits - List every registered circuit
- POST /circuits/reset - Force-close every circuit
- GET /circuits/{service} - Get one circuit
- POST /circuits/{service}/open - Force a circuit open
- POST /circuits/{service}/close - Force a circuit closed
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from gapminer.api.dependencies import get_registry_dep
from gapminer.api.models import CircuitListResponse, CircuitResetResponse, CircuitResponse
from gapminer.circuit_breaker import CircuitBreakerRegistry, ServiceCircuitBreaker

router = APIRouter()


def _require_breaker(registry: CircuitBreakerRegistry, service: str) -> ServiceCircuitBreaker:
    breaker = registry.get(service)
    if breaker is None:
        raise HTTPException(status_code=404, detail=f"Circuit {service} not found")
    return breaker


@router.get("", response_model=CircuitListResponse)
def get_circuits(
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> CircuitListResponse:
    """List every registered circuit, sorted by service name."""
    metrics = registry.get_all_metrics()
    circuits = [CircuitResponse.from_metrics(metrics[name]) for name in sorted(metrics)]
    return CircuitListResponse(circuits=circuits, total=len(circuits))


@router.post("/reset", response_model=CircuitResetResponse)
def reset_circuits(
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> CircuitResetResponse:
    """Force-close every circuit.

    Returns:
        Number of circuits that were not closed before the reset.
    """
    return CircuitResetResponse(reset_count=registry.reset_all())


@router.get("/{service}", response_model=CircuitResponse)
def get_circuit(
    service: str,
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> CircuitResponse:
    """Get a circuit by service name.

    Raises:
        HTTPException: 404 if no breaker exists for the service.
    """
    return CircuitResponse.from_metrics(_require_breaker(registry, service).get_metrics())


@router.post("/{service}/open", response_model=CircuitResponse)
def open_circuit(
    service: str,
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> CircuitResponse:
    """Force a circuit open and restart its retry timer."""
    breaker = _require_breaker(registry, service)
    breaker.force_open()
    return CircuitResponse.from_metrics(breaker.get_metrics())


@router.post("/{service}/close", response_model=CircuitResponse)
def close_circuit(
    service: str,
    registry: CircuitBreakerRegistry = Depends(get_registry_dep),
) -> CircuitResponse:
    """Force a circuit closed, clearing its failure and success counts."""
    breaker = _require_breaker(registry, service)
    breaker.force_close()
    return CircuitResponse.from_metrics(breaker.get_metrics())
