"""Explicitly passed wrapper around a prometheus_client CollectorRegistry.

Never reach for prometheus_client.REGISTRY implicitly: every constructor
takes a MetricsRegistry, so tests build one isolated registry per case.

    registry = MetricsRegistry()            # isolated
    registry = MetricsRegistry.default()    # process-wide prometheus REGISTRY
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

from qortex_metrics.errors import RegistrationError
from qortex_metrics.logging import get_logger
from qortex_metrics.name import Name

C = TypeVar("C")


class MetricsRegistry:
    """Registers metric families against one backend CollectorRegistry.

    Thread-safety of registration and of per-family storage is the
    backend's; no locks are added here.
    """

    def __init__(self, collector_registry: CollectorRegistry | None = None) -> None:
        if collector_registry is None:
            collector_registry = CollectorRegistry(auto_describe=True)
        self._registry = collector_registry

    @classmethod
    def default(cls) -> MetricsRegistry:
        return cls(REGISTRY)

    def register(
        self,
        kind: str,
        name: Name,
        ctor: Callable[..., C],
        documentation: str,
        labelnames: Sequence[str] = (),
        **ctor_kwargs: Any,
    ) -> C:
        """Construct and register one backend family.

        Duplicate names and backend-rejected definitions (e.g. a label name
        the backend reserves) raise RegistrationError; the backend error is
        chained as __cause__. A failed registration leaves the registry as
        it was.
        """
        try:
            collector = ctor(
                name.value,
                documentation,
                labelnames=tuple(labelnames),
                registry=self._registry,
                **ctor_kwargs,
            )
        except ValueError as exc:
            get_logger(__name__).warning(
                "metrics.family.registration_failed",
                name=name.value,
                kind=kind,
                error=str(exc),
            )
            raise RegistrationError(name.value, str(exc)) from exc

        get_logger(__name__).debug(
            "metrics.family.registered",
            name=name.value,
            kind=kind,
            labels=list(labelnames),
        )
        return collector

    def sample_value(self, name: str, labels: Mapping[str, str] | None = None) -> float | None:
        """Read back a single sample, e.g. ``requests_total`` or ``latency_count``."""
        return self._registry.get_sample_value(name, dict(labels or {}))

    def registered_names(self) -> list[str]:
        """Family names as the backend reports them (counters without ``_total``)."""
        return sorted(family.name for family in self._registry.collect())

    def __repr__(self) -> str:
        return f"MetricsRegistry({self._registry!r})"
