"""Escape hatch to the prometheus_client objects behind our handles.

For interop with code that speaks prometheus_client directly. Only family
objects are exposed: a handle narrowed to specific label values raises
NarrowedHandleError, since its parent family is shared by every label
combination. map_k wrappers are looked through; the narrowing state of
the handle underneath decides.
"""

from __future__ import annotations

from typing import Any

from prometheus_client import CollectorRegistry

from qortex_metrics import counter, gauge, histogram, summary
from qortex_metrics.errors import NarrowedHandleError
from qortex_metrics.registry import MetricsRegistry

_NO_LABELS = (
    counter._NoLabelsCounter,
    gauge._NoLabelsGauge,
    histogram._NoLabelsHistogram,
    summary._NoLabelsSummary,
)
_LABELLED = {
    counter._LabelledCounter: "counter",
    gauge._LabelledGauge: "gauge",
    histogram._LabelledHistogram: "histogram",
    summary._LabelledSummary: "summary",
}
_MAPPED = (
    counter._MapKCounter,
    gauge._MapKGauge,
    histogram._MapKHistogram,
    summary._MapKSummary,
)
_UNLABELLED = (
    counter._UnlabelledCounterImpl,
    gauge._UnlabelledGaugeImpl,
    histogram._UnlabelledHistogramImpl,
    summary._UnlabelledSummaryImpl,
)
_MAPPED_UNLABELLED = (
    counter._MapKUnlabelledCounter,
    gauge._MapKUnlabelledGauge,
    histogram._MapKUnlabelledHistogram,
    summary._MapKUnlabelledSummary,
)

Handle = counter.Counter | gauge.Gauge | histogram.Histogram | summary.Summary
Unlabelled = (
    counter.UnlabelledCounter[Any]
    | gauge.UnlabelledGauge[Any]
    | histogram.UnlabelledHistogram[Any]
    | summary.UnlabelledSummary[Any]
)


def as_backend(handle: Handle) -> Any:
    """The registered prometheus_client family behind a no-label handle."""
    while isinstance(handle, _MAPPED):
        handle = handle.base
    if isinstance(handle, _NO_LABELS):
        return handle.underlying
    kind = _LABELLED.get(type(handle))
    if kind is not None:
        raise NarrowedHandleError(kind)
    raise TypeError(f"Not a metric handle: {type(handle).__name__}")


def as_backend_unlabelled(family: Unlabelled) -> Any:
    """The registered prometheus_client family behind an unlabelled family."""
    while isinstance(family, _MAPPED_UNLABELLED):
        family = family.base
    if isinstance(family, _UNLABELLED):
        return family.underlying
    raise TypeError(f"Not an unlabelled metric family: {type(family).__name__}")


def as_backend_registry(registry: MetricsRegistry) -> CollectorRegistry:
    """The prometheus_client CollectorRegistry wrapped by ``registry``."""
    return registry._registry
