"""Gauge metric: a value that can go up and down."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

import prometheus_client

from qortex_metrics.binder import UNSET, LabelBinder, prepare
from qortex_metrics.effect import SYNC, Effect, NaturalTransformation, check_transformation
from qortex_metrics.name import Label, Name, require_name
from qortex_metrics.registry import MetricsRegistry

A = TypeVar("A")


class Gauge(ABC):
    """A gauge handle, either without labels or bound to label values."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def inc_by(self, amount: float) -> Any: ...

    @abstractmethod
    def dec_by(self, amount: float) -> Any: ...

    @abstractmethod
    def set(self, value: float) -> Any: ...

    @abstractmethod
    def set_to_current_time(self) -> Any: ...

    def inc(self) -> Any:
        return self.inc_by(1.0)

    def dec(self) -> Any:
        return self.dec_by(1.0)

    def map_k(self, fk: NaturalTransformation) -> Gauge:
        check_transformation(self.effect, fk)
        return _MapKGauge(self, fk)

    # Constructors ---------------------------------------------------

    @staticmethod
    def no_labels(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        *,
        effect: Effect = SYNC,
    ) -> Gauge:
        require_name(name)
        underlying = registry.register("gauge", name, prometheus_client.Gauge, help)
        return _NoLabelsGauge(underlying, effect)

    @staticmethod
    def labelled(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        labels: Sequence[Label],
        extract: Callable[[A], Sequence[str]],
        *,
        effect: Effect = SYNC,
        sample: Any = UNSET,
    ) -> UnlabelledGauge[A]:
        binder = prepare(name, labels, extract, sample)
        underlying = registry.register(
            "gauge", name, prometheus_client.Gauge, help, binder.label_names
        )
        return _UnlabelledGaugeImpl(underlying, binder, effect)


class _BackendGauge(Gauge):
    """Shared operations for handles backed directly by a prometheus gauge."""

    __slots__ = ()

    def _target(self) -> prometheus_client.Gauge:
        raise NotImplementedError

    def inc_by(self, amount: float) -> Any:
        target = self._target()
        return self.effect.delay(lambda: target.inc(amount))

    def dec_by(self, amount: float) -> Any:
        target = self._target()
        return self.effect.delay(lambda: target.dec(amount))

    def set(self, value: float) -> Any:
        target = self._target()
        return self.effect.delay(lambda: target.set(value))

    def set_to_current_time(self) -> Any:
        target = self._target()
        return self.effect.delay(target.set_to_current_time)


class _NoLabelsGauge(_BackendGauge):
    __slots__ = ("underlying", "effect")

    def __init__(self, underlying: prometheus_client.Gauge, effect: Effect) -> None:
        self.underlying = underlying
        self.effect = effect

    def _target(self) -> prometheus_client.Gauge:
        return self.underlying


class _LabelledGauge(_BackendGauge):
    __slots__ = ("child", "effect")

    def __init__(self, child: prometheus_client.Gauge, effect: Effect) -> None:
        self.child = child
        self.effect = effect

    def _target(self) -> prometheus_client.Gauge:
        return self.child


class _MapKGauge(Gauge):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: Gauge, fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def inc_by(self, amount: float) -> Any:
        return self.fk(self.base.inc_by(amount))

    def dec_by(self, amount: float) -> Any:
        return self.fk(self.base.dec_by(amount))

    def set(self, value: float) -> Any:
        return self.fk(self.base.set(value))

    def set_to_current_time(self) -> Any:
        return self.fk(self.base.set_to_current_time())


class UnlabelledGauge(ABC, Generic[A]):
    """A registered Gauge family; apply a label to get a settable Gauge."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def label(self, a: A) -> Gauge: ...

    def map_k(self, fk: NaturalTransformation) -> UnlabelledGauge[A]:
        check_transformation(self.effect, fk)
        return _MapKUnlabelledGauge(self, fk)


class _UnlabelledGaugeImpl(UnlabelledGauge[A]):
    __slots__ = ("underlying", "binder", "effect")

    def __init__(
        self, underlying: prometheus_client.Gauge, binder: LabelBinder[A], effect: Effect
    ) -> None:
        self.underlying = underlying
        self.binder = binder
        self.effect = effect

    def label(self, a: A) -> Gauge:
        return _LabelledGauge(self.underlying.labels(*self.binder.values(a)), self.effect)


class _MapKUnlabelledGauge(UnlabelledGauge[A]):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: UnlabelledGauge[A], fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def label(self, a: A) -> Gauge:
        return self.base.label(a).map_k(self.fk)
