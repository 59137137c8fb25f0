"""Histogram metric: track the size and number of events in buckets.

Bucket accumulation is done by prometheus_client; this module only builds
and binds the families. Default buckets are the backend's latency buckets,
in seconds, which pairs with timed_seconds().
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

import prometheus_client

from qortex_metrics.binder import UNSET, LabelBinder, prepare
from qortex_metrics.effect import SYNC, Effect, NaturalTransformation, check_transformation
from qortex_metrics.errors import ValidationError
from qortex_metrics.name import Label, Name, require_name
from qortex_metrics.registry import MetricsRegistry
from qortex_metrics.timing import TimedObservations

A = TypeVar("A")

DEFAULT_BUCKETS: tuple[float, ...] = tuple(prometheus_client.Histogram.DEFAULT_BUCKETS)


def linear_buckets(start: float, width: float, count: int) -> tuple[float, ...]:
    """``count`` buckets, the first with upper bound ``start``, each ``width`` wide."""
    if count < 1:
        raise ValidationError(f"count {count} invalid: Expected at least 1.", value=count, field="count")
    if not width > 0:
        raise ValidationError(f"width {width} invalid: Expected a positive number.", value=width, field="width")
    return tuple(start + i * width for i in range(count))


def exponential_buckets(start: float, factor: float, count: int) -> tuple[float, ...]:
    """``count`` buckets, the first with upper bound ``start``, each ``factor`` times the last."""
    if count < 1:
        raise ValidationError(f"count {count} invalid: Expected at least 1.", value=count, field="count")
    if not start > 0:
        raise ValidationError(f"start {start} invalid: Expected a positive number.", value=start, field="start")
    if not factor > 1:
        raise ValidationError(f"factor {factor} invalid: Expected a number above 1.", value=factor, field="factor")
    return tuple(start * factor**i for i in range(count))


def _check_buckets(buckets: Sequence[float]) -> tuple[float, ...]:
    bounds = tuple(float(b) for b in buckets)
    if not bounds:
        raise ValidationError("Histogram needs at least one bucket", value=bounds, field="buckets")
    if any(math.isnan(b) for b in bounds):
        raise ValidationError(f"Buckets {bounds} invalid: NaN bound.", value=bounds, field="buckets")
    if any(later <= earlier for earlier, later in zip(bounds, bounds[1:])):
        raise ValidationError(
            f"Buckets {bounds} invalid: Expected strictly increasing bounds.",
            value=bounds,
            field="buckets",
        )
    return bounds


class Histogram(TimedObservations, ABC):
    """A histogram handle, either without labels or bound to label values."""

    __slots__ = ()

    DEFAULT_BUCKETS = DEFAULT_BUCKETS

    effect: Effect

    @abstractmethod
    def observe(self, value: float) -> Any:
        """Persist an observation into this histogram."""

    def map_k(self, fk: NaturalTransformation) -> Histogram:
        check_transformation(self.effect, fk)
        return _MapKHistogram(self, fk)

    # Constructors ---------------------------------------------------

    @staticmethod
    def no_labels(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        buckets: Sequence[float] = DEFAULT_BUCKETS,
        *,
        effect: Effect = SYNC,
    ) -> Histogram:
        require_name(name)
        underlying = registry.register(
            "histogram", name, prometheus_client.Histogram, help,
            buckets=_check_buckets(buckets),
        )
        return _NoLabelsHistogram(underlying, effect)

    @staticmethod
    def labelled(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        labels: Sequence[Label],
        extract: Callable[[A], Sequence[str]],
        buckets: Sequence[float] = DEFAULT_BUCKETS,
        *,
        effect: Effect = SYNC,
        sample: Any = UNSET,
    ) -> UnlabelledHistogram[A]:
        binder = prepare(name, labels, extract, sample)
        underlying = registry.register(
            "histogram", name, prometheus_client.Histogram, help, binder.label_names,
            buckets=_check_buckets(buckets),
        )
        return _UnlabelledHistogramImpl(underlying, binder, effect)


class _NoLabelsHistogram(Histogram):
    __slots__ = ("underlying", "effect")

    def __init__(self, underlying: prometheus_client.Histogram, effect: Effect) -> None:
        self.underlying = underlying
        self.effect = effect

    def observe(self, value: float) -> Any:
        underlying = self.underlying
        return self.effect.delay(lambda: underlying.observe(value))


class _LabelledHistogram(Histogram):
    __slots__ = ("child", "effect")

    def __init__(self, child: prometheus_client.Histogram, effect: Effect) -> None:
        self.child = child
        self.effect = effect

    def observe(self, value: float) -> Any:
        child = self.child
        return self.effect.delay(lambda: child.observe(value))


class _MapKHistogram(Histogram):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: Histogram, fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def observe(self, value: float) -> Any:
        return self.fk(self.base.observe(value))


class UnlabelledHistogram(ABC, Generic[A]):
    """A registered Histogram family; apply a label to be able to observe."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def label(self, a: A) -> Histogram: ...

    def map_k(self, fk: NaturalTransformation) -> UnlabelledHistogram[A]:
        check_transformation(self.effect, fk)
        return _MapKUnlabelledHistogram(self, fk)


class _UnlabelledHistogramImpl(UnlabelledHistogram[A]):
    __slots__ = ("underlying", "binder", "effect")

    def __init__(
        self, underlying: prometheus_client.Histogram, binder: LabelBinder[A], effect: Effect
    ) -> None:
        self.underlying = underlying
        self.binder = binder
        self.effect = effect

    def label(self, a: A) -> Histogram:
        return _LabelledHistogram(self.underlying.labels(*self.binder.values(a)), self.effect)


class _MapKUnlabelledHistogram(UnlabelledHistogram[A]):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: UnlabelledHistogram[A], fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def label(self, a: A) -> Histogram:
        return self.base.label(a).map_k(self.fk)
