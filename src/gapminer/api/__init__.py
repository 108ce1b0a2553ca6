"""GapMiner REST API package.

Exposes the response validators and the circuit breaker registry over
HTTP: validation endpoints, circuit inspection and control, and a health
check driven by circuit state.
"""

from gapminer.api.app import create_app

__all__ = ["create_app"]
