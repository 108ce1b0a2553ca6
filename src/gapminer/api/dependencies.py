"""Request-scoped access to the application's shared objects.

create_app() stores the breaker registry and settings on app.state; routes
receive them through these dependencies so tests can build an app around
their own registry.
"""

from __future__ import annotations

from fastapi import Request

from gapminer.circuit_breaker import CircuitBreakerRegistry
from gapminer.settings import GapMinerSettings


def get_registry_dep(request: Request) -> CircuitBreakerRegistry:
    """Get the application's circuit breaker registry.

    Raises:
        RuntimeError: If the app was not built by create_app().
    """
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise RuntimeError("Registry not initialized. Build the app with create_app().")
    return registry  # type: ignore[no-any-return]


def get_settings_dep(request: Request) -> GapMinerSettings:
    """Get the application's settings.

    Raises:
        RuntimeError: If the app was not built by create_app().
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialized. Build the app with create_app().")
    return settings  # type: ignore[no-any-return]
