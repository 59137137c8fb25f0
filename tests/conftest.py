"""Shared fixtures: isolated registries, a controllable clock."""

from __future__ import annotations

import pytest

from qortex_metrics import MetricsRegistry
from qortex_metrics.effect import AsyncEffect, SyncEffect

# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_metrics_setup():
    """Reset logging/config state before and after each test."""
    from qortex_metrics.bootstrap import reset

    reset()
    yield
    reset()


@pytest.fixture()
def registry() -> MetricsRegistry:
    """A fresh backend registry per test; never the process-wide default."""
    return MetricsRegistry()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sync_effect(clock: FakeClock) -> SyncEffect:
    return SyncEffect(clock=clock)


@pytest.fixture()
def async_effect(clock: FakeClock) -> AsyncEffect:
    return AsyncEffect(clock=clock)
