"""Counter metric: a monotonically increasing value.

Constructors register a family once at setup:

    requests = Counter.labelled(
        registry, Name("http_requests_total"), "HTTP requests",
        (Label("method"), Label("path")),
        lambda r: (r.method, r.path),
    )
    requests.label(request).inc()

Unsafe backend access lives in qortex_metrics.unsafe.
"""

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


class Counter(ABC):
    """A counter handle, either without labels or bound to label values."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def inc_by(self, amount: float) -> Any:
        """Increment by ``amount``. Negative amounts are rejected by the backend."""

    def inc(self) -> Any:
        return self.inc_by(1.0)

    def map_k(self, fk: NaturalTransformation) -> Counter:
        check_transformation(self.effect, fk)
        return _MapKCounter(self, fk)

    # Constructors ---------------------------------------------------

    @staticmethod
    def no_labels(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        *,
        effect: Effect = SYNC,
    ) -> Counter:
        """Register a Counter with no labels; directly incrementable."""
        require_name(name)
        underlying = registry.register("counter", name, prometheus_client.Counter, help)
        return _NoLabelsCounter(underlying, effect)

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
    ) -> UnlabelledCounter[A]:
        """Register a labelled Counter family.

        ``extract`` turns a future value into exactly ``len(labels)``
        strings, assigned to the labels by position.
        """
        binder = prepare(name, labels, extract, sample)
        underlying = registry.register(
            "counter", name, prometheus_client.Counter, help, binder.label_names
        )
        return _UnlabelledCounterImpl(underlying, binder, effect)


class _NoLabelsCounter(Counter):
    __slots__ = ("underlying", "effect")

    def __init__(self, underlying: prometheus_client.Counter, effect: Effect) -> None:
        self.underlying = underlying
        self.effect = effect

    def inc_by(self, amount: float) -> Any:
        underlying = self.underlying
        return self.effect.delay(lambda: underlying.inc(amount))


class _LabelledCounter(Counter):
    __slots__ = ("child", "effect")

    def __init__(self, child: prometheus_client.Counter, effect: Effect) -> None:
        self.child = child
        self.effect = effect

    def inc_by(self, amount: float) -> Any:
        child = self.child
        return self.effect.delay(lambda: child.inc(amount))


class _MapKCounter(Counter):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: Counter, fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def inc_by(self, amount: float) -> Any:
        return self.fk(self.base.inc_by(amount))


class UnlabelledCounter(ABC, Generic[A]):
    """A registered Counter family; apply a label to get an incrementable Counter."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def label(self, a: A) -> Counter: ...

    def map_k(self, fk: NaturalTransformation) -> UnlabelledCounter[A]:
        check_transformation(self.effect, fk)
        return _MapKUnlabelledCounter(self, fk)


class _UnlabelledCounterImpl(UnlabelledCounter[A]):
    __slots__ = ("underlying", "binder", "effect")

    def __init__(
        self, underlying: prometheus_client.Counter, binder: LabelBinder[A], effect: Effect
    ) -> None:
        self.underlying = underlying
        self.binder = binder
        self.effect = effect

    def label(self, a: A) -> Counter:
        return _LabelledCounter(self.underlying.labels(*self.binder.values(a)), self.effect)


class _MapKUnlabelledCounter(UnlabelledCounter[A]):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: UnlabelledCounter[A], fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def label(self, a: A) -> Counter:
        return self.base.label(a).map_k(self.fk)
