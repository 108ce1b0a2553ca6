"""Server runner module for the GapMiner API.

Provides a run_server utility that configures and starts uvicorn
with appropriate defaults.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator

import uvicorn

from gapminer.settings import SETTINGS_ENV_VAR


@contextmanager
def _temporary_env_var(name: str, value: str | None) -> Iterator[None]:
    """Temporarily set an environment variable, restoring original state on exit."""
    if value is None:
        yield
        return
    old_value = os.environ.get(name)
    os.environ[name] = value
    try:
        yield
    finally:
        if old_value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = old_value


def run_server(
    host: str = "127.0.0.1",
    port: int = 8420,
    log_level: str = "info",
    reload: bool = False,
    config_path: str | None = None,
    **kwargs: Any,
) -> None:
    """Run the GapMiner API server.

    Args:
        host: The host to bind to. Defaults to '127.0.0.1'.
        port: The port to bind to. Defaults to 8420.
        log_level: The log level for uvicorn. Defaults to 'info'.
        reload: Whether to enable auto-reload. Defaults to False.
        config_path: Optional settings file. If provided, sets GAPMINER_CONFIG
            so the app factory picks it up.
        **kwargs: Additional keyword arguments to forward to uvicorn.run.
    """
    with _temporary_env_var(SETTINGS_ENV_VAR, config_path):
        uvicorn.run(
            "gapminer.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            log_level=log_level,
            reload=reload,
            **kwargs,
        )
