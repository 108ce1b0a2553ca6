"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gapminer.api.routes import register_routes
from gapminer.circuit_breaker import CircuitBreakerRegistry, install_default_fallbacks
from gapminer.settings import GapMinerSettings, resolve_settings

logger = logging.getLogger(__name__)


async def _value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle ValueError exceptions.

    Args:
        request: The HTTP request.
        exc: The ValueError exception.

    Returns:
        JSON response with 422 status code.
    """
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


async def _general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions.

    Args:
        request: The HTTP request.
        exc: The exception.

    Returns:
        JSON response with 500 status code.
    """
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application.

    Args:
        app: The FastAPI application instance.
    """
    # Note: More specific handlers must be registered before general ones
    app.add_exception_handler(ValueError, _value_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _general_exception_handler)


def create_app(
    settings: GapMinerSettings | None = None,
    registry: CircuitBreakerRegistry | None = None,
    *,
    install_fallbacks: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to serve with. Resolved from GAPMINER_CONFIG or the
            nearest gapminer.toml if None.
        registry: Circuit breaker registry. Built from settings if None.
        install_fallbacks: Register the predefined service fallbacks.

    Returns:
        A configured FastAPI application.
    """
    if settings is None:
        settings = resolve_settings()
    if registry is None:
        registry = settings.build_registry()
    if install_fallbacks:
        install_default_fallbacks(registry)

    app = FastAPI(
        title="GapMiner",
        version="1.0.0",
        docs_url="/docs",
    )
    app.state.settings = settings
    app.state.registry = registry

    _register_error_handlers(app)
    register_routes(app)

    return app
