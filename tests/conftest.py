"""Root conftest.py for pytest configuration.

Resets the process-wide circuit breaker registry around every test so
breaker state never leaks between tests, and provides a manual clock for
driving breaker timeouts without sleeping.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from gapminer.circuit_breaker import reset_registry


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_registry() -> Iterator[None]:
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def clock() -> FakeClock:
    """A manual clock starting at a fixed epoch time."""
    return FakeClock()
