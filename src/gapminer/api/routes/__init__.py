"""Route registration for FastAPI app.

Wires the health, circuits and validation route modules to the app with
their URL prefixes.
"""

from __future__ import annotations

from fastapi import FastAPI

from gapminer.api.routes import circuits, health, validation


def register_routes(app: FastAPI) -> None:
    """Register all route modules to the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(circuits.router, prefix="/circuits", tags=["circuits"])
    app.include_router(validation.router, prefix="/validate", tags=["validation"])
