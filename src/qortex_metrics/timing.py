"""Timed observation shared by Histogram and Summary handles.

    latency.timed(lambda: fetch(url), TimeUnit.MILLISECONDS)        # SYNC
    await alatency.timed(fetch_async(url), TimeUnit.MILLISECONDS)   # ASYNC

The duration is measured with the handle's Effect clock and recorded in a
finally block: a raising or cancelled action is still observed, and its
outcome is returned or re-raised unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from qortex_metrics.effect import Effect
from qortex_metrics.timeunit import TimeUnit


class TimedObservations(ABC):
    __slots__ = ()

    effect: Effect

    @abstractmethod
    def observe(self, value: float) -> Any: ...

    def timed(self, action: Any, unit: TimeUnit) -> Any:
        """Run ``action`` and observe how long it took, in ``unit``.

        ``action`` is a zero-argument callable under SYNC and an awaitable
        under ASYNC.
        """
        if not isinstance(unit, TimeUnit):
            raise TypeError(f"unit must be a TimeUnit, got {type(unit).__name__}")
        return self.effect.bracket_timed(
            action, lambda elapsed: self.observe(unit.from_seconds(elapsed))
        )

    def timed_seconds(self, action: Any) -> Any:
        """timed() in seconds, the unit of the default histogram buckets."""
        return self.timed(action, TimeUnit.SECONDS)
