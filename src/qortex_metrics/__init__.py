"""qortex metrics: validated, arity-safe construction of Prometheus metrics.

Public API:
    Name / Suffix / Label    — validated names (Name.of raises, Name.parse returns errors)
    Counter / Gauge / Histogram / Summary
        .no_labels(...)      — directly observable handle
        .labelled(...)       — UnlabelledX[A]; .label(a) binds label values
    handle.map_k(fk)         — run a handle in another Effect (SYNC, ASYNC, ...)
    MetricsRegistry          — explicitly passed backend registry
    unsafe.as_backend(h)     — prometheus_client family behind a no-label handle

Setup (optional):
    configure(cfg)           — structured logging + summary window defaults
    reset()                  — Reset for testing
"""

from qortex_metrics.bootstrap import configure, is_configured, reset
from qortex_metrics.config import MetricsConfig
from qortex_metrics.counter import Counter, UnlabelledCounter
from qortex_metrics.effect import (
    ASYNC,
    SYNC,
    AsyncEffect,
    Effect,
    NaturalTransformation,
    SyncEffect,
    sync_to_async,
)
from qortex_metrics.errors import (
    ArityMismatchError,
    MetricsError,
    NarrowedHandleError,
    RegistrationError,
    ValidationError,
)
from qortex_metrics.gauge import Gauge, UnlabelledGauge
from qortex_metrics.histogram import (
    Histogram,
    UnlabelledHistogram,
    exponential_buckets,
    linear_buckets,
)
from qortex_metrics.logging import get_logger
from qortex_metrics.name import Label, Name, Suffix
from qortex_metrics.registry import MetricsRegistry
from qortex_metrics.summary import Quantile, Summary, SummaryConfig, UnlabelledSummary, summary_config
from qortex_metrics.timeunit import TimeUnit

__all__ = [
    # Setup
    "configure",
    "is_configured",
    "reset",
    "MetricsConfig",
    "get_logger",
    # Names
    "Name",
    "Suffix",
    "Label",
    # Registry
    "MetricsRegistry",
    # Metric kinds
    "Counter",
    "UnlabelledCounter",
    "Gauge",
    "UnlabelledGauge",
    "Histogram",
    "UnlabelledHistogram",
    "linear_buckets",
    "exponential_buckets",
    "Summary",
    "UnlabelledSummary",
    "Quantile",
    "SummaryConfig",
    "summary_config",
    "TimeUnit",
    # Execution contexts
    "Effect",
    "SyncEffect",
    "AsyncEffect",
    "SYNC",
    "ASYNC",
    "NaturalTransformation",
    "sync_to_async",
    # Errors
    "MetricsError",
    "ValidationError",
    "RegistrationError",
    "ArityMismatchError",
    "NarrowedHandleError",
]
