"""Execution contexts for metric operations and transformations between them.

Every handle operation returns a value "in" the handle's Effect:

    SYNC   — the operation has already run; the value is the plain result
    ASYNC  — the operation is a coroutine; it runs when awaited

A NaturalTransformation rewrites values of one Effect into another.
``handle.map_k(fk)`` keeps the original handle and applies ``fk`` to the
result of every operation, so nothing is re-registered and the same backend
child is addressed.

Usage:
    counter = Counter.no_labels(registry, Name("jobs"), "Jobs run")
    acounter = counter.map_k(sync_to_async())
    await acounter.inc()
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

Clock = Callable[[], float]


class Effect(ABC):
    """Strategy: how an operation is sequenced and run.

    delay() suspends a side effect into the context. bracket_timed() runs an
    action and always reports its elapsed time, on success, failure or
    cancellation. clock is the monotonic clock used for that measurement.
    """

    name: str = "effect"

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock: Clock = clock or time.monotonic

    @abstractmethod
    def delay(self, thunk: Callable[[], Any]) -> Any: ...

    @abstractmethod
    def bracket_timed(self, action: Any, record: Callable[[float], Any]) -> Any: ...

    def accepts(self, other: Effect) -> bool:
        """True if values of ``other`` can be fed to a transformation from self."""
        return self.name == other.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SyncEffect(Effect):
    """Run now, on the calling thread. Values are plain results."""

    name = "sync"

    def delay(self, thunk: Callable[[], Any]) -> Any:
        return thunk()

    def bracket_timed(self, action: Callable[[], Any], record: Callable[[float], Any]) -> Any:
        start = self.clock()
        try:
            return action()
        finally:
            record(self.clock() - start)


class AsyncEffect(Effect):
    """asyncio: values are awaitables, side effects run when awaited."""

    name = "async"

    def delay(self, thunk: Callable[[], Any]) -> Awaitable[Any]:
        async def _run() -> Any:
            return thunk()

        return _run()

    def bracket_timed(self, action: Awaitable[Any], record: Callable[[float], Any]) -> Awaitable[Any]:
        async def _run() -> Any:
            start = self.clock()
            try:
                return await action
            finally:
                # CancelledError passes through here too
                await record(self.clock() - start)

        return _run()


SYNC = SyncEffect()
ASYNC = AsyncEffect()


@dataclass(frozen=True)
class NaturalTransformation:
    """A structure-preserving map ``source ~> target`` over operation results."""

    source: Effect
    target: Effect
    fn: Callable[[Any], Any]

    def __call__(self, fa: Any) -> Any:
        return self.fn(fa)

    def and_then(self, other: NaturalTransformation) -> NaturalTransformation:
        """``self`` followed by ``other``: F ~> G then G ~> H gives F ~> H."""
        if not other.source.accepts(self.target):
            raise TypeError(
                f"Cannot compose {self.source.name}~>{self.target.name} "
                f"with {other.source.name}~>{other.target.name}"
            )
        first, second = self.fn, other.fn
        return NaturalTransformation(self.source, other.target, lambda fa: second(first(fa)))

    def compose(self, other: NaturalTransformation) -> NaturalTransformation:
        """``other`` followed by ``self``."""
        return other.and_then(self)

    @classmethod
    def identity(cls, effect: Effect) -> NaturalTransformation:
        return cls(effect, effect, lambda fa: fa)


async def _pure(value: Any) -> Any:
    return value


def sync_to_async(target: AsyncEffect | None = None) -> NaturalTransformation:
    """Lift SYNC results into awaitables.

    The underlying operation has already run when the awaitable is created;
    awaiting it only yields the result.
    """
    return NaturalTransformation(SYNC, target or ASYNC, _pure)


def check_transformation(effect: Effect, fk: NaturalTransformation) -> None:
    if not isinstance(fk, NaturalTransformation):
        raise TypeError(f"map_k expects a NaturalTransformation, got {type(fk).__name__}")
    if not fk.source.accepts(effect):
        raise TypeError(
            f"Transformation from {fk.source.name!r} cannot be applied "
            f"to a handle running in {effect.name!r}"
        )
