"""Summary metric, to track the size of events.

Quantiles are meant over a sliding window of time, configured by:

    max_age_seconds — how long observations are kept before they are
                      discarded. Default 600 (10 minutes).
    age_buckets     — buckets used to implement the sliding window. With a
                      10 minute window and 5 age buckets, buckets switch
                      every 2 minutes. Default 5.

The short constructors (no_labels, labelled) take both from the active
MetricsConfig; the *_quantiles constructors take them explicitly. The
window and quantiles are validated and kept on the family as a
SummaryConfig. Quantile estimation itself is the backend's concern:
prometheus_client summaries export ``_count`` and ``_sum`` only, so a
family registered with quantiles logs ``metrics.summary.quantiles_unsupported``
once, at construction.

See https://prometheus.io/docs/practices/histograms/ for more on quantiles.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import prometheus_client

from qortex_metrics.binder import UNSET, LabelBinder, prepare
from qortex_metrics.bootstrap import active_config
from qortex_metrics.effect import SYNC, Effect, NaturalTransformation, check_transformation
from qortex_metrics.errors import NarrowedHandleError, ValidationError
from qortex_metrics.logging import get_logger
from qortex_metrics.name import Label, Name, require_name
from qortex_metrics.registry import MetricsRegistry
from qortex_metrics.timing import TimedObservations

A = TypeVar("A")


def _in_unit_range(x: float) -> bool:
    return not math.isnan(x) and 0.0 <= x <= 1.0


@dataclass(frozen=True)
class Quantile:
    """The percentile and tolerated error to be observed.

    Quantile.of(0.5, 0.05)    - 50th percentile (= median) with 5% tolerated error
    Quantile.of(0.9, 0.01)    - 90th percentile with 1% tolerated error
    Quantile.of(0.99, 0.001)  - 99th percentile with 0.1% tolerated error

    Quantile.parse(q, e) returns a ValidationError instead of raising.
    """

    quantile: float
    error: float

    def __post_init__(self) -> None:
        err = _quantile_error(self.quantile, self.error)
        if err is not None:
            raise err

    @classmethod
    def of(cls, quantile: float, error: float) -> Quantile:
        return cls(quantile, error)

    @classmethod
    def parse(cls, quantile: float, error: float) -> Quantile | ValidationError:
        err = _quantile_error(quantile, error)
        if err is not None:
            return err
        return cls(quantile, error)


def _quantile_error(quantile: float, error: float) -> ValidationError | None:
    if not _in_unit_range(quantile):
        return ValidationError(
            f"Quantile {quantile} invalid: Expected number between 0.0 and 1.0.",
            value=quantile,
            field="quantile",
        )
    if not _in_unit_range(error):
        return ValidationError(
            f"Error {error} invalid: Expected number between 0.0 and 1.0.",
            value=error,
            field="error",
        )
    return None


@dataclass(frozen=True)
class SummaryConfig:
    """Sliding-window settings and tracked quantiles of a Summary family."""

    max_age_seconds: int
    age_buckets: int
    quantiles: tuple[Quantile, ...] = ()

    def __post_init__(self) -> None:
        if self.max_age_seconds <= 0:
            raise ValidationError(
                f"max_age_seconds {self.max_age_seconds} invalid: Expected a positive number.",
                value=self.max_age_seconds,
                field="max_age_seconds",
            )
        if self.age_buckets <= 0:
            raise ValidationError(
                f"age_buckets {self.age_buckets} invalid: Expected a positive number.",
                value=self.age_buckets,
                field="age_buckets",
            )
        for q in self.quantiles:
            if not isinstance(q, Quantile):
                raise TypeError(f"quantiles must be Quantile values, got {type(q).__name__}")


def _default_window() -> tuple[int, int]:
    cfg = active_config()
    return cfg.summary_max_age_seconds, cfg.summary_age_buckets


def _warn_quantiles_unsupported(name: Name, config: SummaryConfig) -> None:
    if config.quantiles:
        get_logger(__name__).warning(
            "metrics.summary.quantiles_unsupported",
            name=name.value,
            quantiles=[(q.quantile, q.error) for q in config.quantiles],
            max_age_seconds=config.max_age_seconds,
            age_buckets=config.age_buckets,
        )


class Summary(TimedObservations, ABC):
    """A summary handle, either without labels or bound to label values."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def observe(self, value: float) -> Any:
        """Persist an observation into this summary."""

    def map_k(self, fk: NaturalTransformation) -> Summary:
        check_transformation(self.effect, fk)
        return _MapKSummary(self, fk)

    # Constructors ---------------------------------------------------

    @staticmethod
    def no_labels(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        *quantiles: Quantile,
        effect: Effect = SYNC,
    ) -> Summary:
        """Summary with no labels and the configured sliding window."""
        max_age_seconds, age_buckets = _default_window()
        return Summary.no_labels_quantiles(
            registry, name, help, max_age_seconds, age_buckets, *quantiles, effect=effect
        )

    @staticmethod
    def no_labels_quantiles(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        max_age_seconds: int,
        age_buckets: int,
        *quantiles: Quantile,
        effect: Effect = SYNC,
    ) -> Summary:
        require_name(name)
        config = SummaryConfig(max_age_seconds, age_buckets, tuple(quantiles))
        underlying = registry.register("summary", name, prometheus_client.Summary, help)
        _warn_quantiles_unsupported(name, config)
        return _NoLabelsSummary(underlying, config, effect)

    @staticmethod
    def labelled(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        labels: Sequence[Label],
        extract: Callable[[A], Sequence[str]],
        *quantiles: Quantile,
        effect: Effect = SYNC,
        sample: Any = UNSET,
    ) -> UnlabelledSummary[A]:
        """Labelled Summary with the configured sliding window.

        ``extract`` turns a future value into exactly ``len(labels)``
        strings, assigned to the labels by position.
        """
        max_age_seconds, age_buckets = _default_window()
        return Summary.labelled_quantiles(
            registry, name, help, max_age_seconds, age_buckets, labels, extract,
            *quantiles, effect=effect, sample=sample,
        )

    @staticmethod
    def labelled_quantiles(
        registry: MetricsRegistry,
        name: Name,
        help: str,
        max_age_seconds: int,
        age_buckets: int,
        labels: Sequence[Label],
        extract: Callable[[A], Sequence[str]],
        *quantiles: Quantile,
        effect: Effect = SYNC,
        sample: Any = UNSET,
    ) -> UnlabelledSummary[A]:
        binder = prepare(name, labels, extract, sample)
        config = SummaryConfig(max_age_seconds, age_buckets, tuple(quantiles))
        underlying = registry.register(
            "summary", name, prometheus_client.Summary, help, binder.label_names
        )
        _warn_quantiles_unsupported(name, config)
        return _UnlabelledSummaryImpl(underlying, binder, config, effect)


class _NoLabelsSummary(Summary):
    __slots__ = ("underlying", "config", "effect")

    def __init__(
        self, underlying: prometheus_client.Summary, config: SummaryConfig, effect: Effect
    ) -> None:
        self.underlying = underlying
        self.config = config
        self.effect = effect

    def observe(self, value: float) -> Any:
        underlying = self.underlying
        return self.effect.delay(lambda: underlying.observe(value))


class _LabelledSummary(Summary):
    __slots__ = ("child", "effect")

    def __init__(self, child: prometheus_client.Summary, effect: Effect) -> None:
        self.child = child
        self.effect = effect

    def observe(self, value: float) -> Any:
        child = self.child
        return self.effect.delay(lambda: child.observe(value))


class _MapKSummary(Summary):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: Summary, fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def observe(self, value: float) -> Any:
        return self.fk(self.base.observe(value))


class UnlabelledSummary(ABC, Generic[A]):
    """A registered Summary family; apply a label to be able to observe."""

    __slots__ = ()

    effect: Effect

    @abstractmethod
    def label(self, a: A) -> Summary: ...

    def map_k(self, fk: NaturalTransformation) -> UnlabelledSummary[A]:
        check_transformation(self.effect, fk)
        return _MapKUnlabelledSummary(self, fk)


class _UnlabelledSummaryImpl(UnlabelledSummary[A]):
    __slots__ = ("underlying", "binder", "config", "effect")

    def __init__(
        self,
        underlying: prometheus_client.Summary,
        binder: LabelBinder[A],
        config: SummaryConfig,
        effect: Effect,
    ) -> None:
        self.underlying = underlying
        self.binder = binder
        self.config = config
        self.effect = effect

    def label(self, a: A) -> Summary:
        return _LabelledSummary(self.underlying.labels(*self.binder.values(a)), self.effect)


class _MapKUnlabelledSummary(UnlabelledSummary[A]):
    __slots__ = ("base", "fk", "effect")

    def __init__(self, base: UnlabelledSummary[A], fk: NaturalTransformation) -> None:
        self.base = base
        self.fk = fk
        self.effect = fk.target

    def label(self, a: A) -> Summary:
        return self.base.label(a).map_k(self.fk)


def summary_config(target: Summary | UnlabelledSummary[Any]) -> SummaryConfig:
    """Sliding-window settings of the family behind ``target``.

    Looks through map_k wrappers. Label-bound handles do not carry them.
    """
    if isinstance(target, (_NoLabelsSummary, _UnlabelledSummaryImpl)):
        return target.config
    if isinstance(target, (_MapKSummary, _MapKUnlabelledSummary)):
        return summary_config(target.base)
    if isinstance(target, _LabelledSummary):
        raise NarrowedHandleError("summary")
    raise TypeError(f"Not a summary handle: {type(target).__name__}")
