"""Tests for MetricsRegistry."""

from __future__ import annotations

import prometheus_client
import pytest

from qortex_metrics import Counter, Gauge, Histogram, Label, MetricsRegistry, Name, RegistrationError


class TestMetricsRegistry:
    def test_fresh_registries_are_isolated(self):
        a, b = MetricsRegistry(), MetricsRegistry()
        Counter.no_labels(a, Name("jobs"), "Jobs").inc()
        assert a.sample_value("jobs_total") == 1.0
        assert b.sample_value("jobs_total") is None

    def test_wraps_given_collector_registry(self):
        backend = prometheus_client.CollectorRegistry()
        registry = MetricsRegistry(backend)
        Gauge.no_labels(registry, Name("depth"), "Depth").set(7)
        assert backend.get_sample_value("depth") == 7.0

    def test_default_wraps_process_registry(self):
        registry = MetricsRegistry.default()
        assert registry._registry is prometheus_client.REGISTRY

    def test_registered_names(self, registry):
        Counter.no_labels(registry, Name("jobs"), "Jobs")
        Histogram.no_labels(registry, Name("latency_seconds"), "Latency")
        Gauge.labelled(registry, Name("pool"), "Pool", (Label("p"),), lambda p: (p,))
        assert registry.registered_names() == ["jobs", "latency_seconds", "pool"]

    def test_missing_series_is_none(self, registry):
        Counter.labelled(registry, Name("r"), "r", (Label("a"),), lambda a: (a,))
        assert registry.sample_value("r_total", {"a": "never"}) is None

    def test_failed_registration_leaves_registry_unchanged(self, registry):
        Counter.no_labels(registry, Name("jobs"), "Jobs")
        with pytest.raises(RegistrationError):
            Gauge.no_labels(registry, Name("jobs"), "Jobs gauge")
        assert registry.registered_names() == ["jobs"]

    def test_registration_error_message(self, registry):
        Counter.no_labels(registry, Name("jobs"), "Jobs")
        with pytest.raises(RegistrationError, match="Failed to register metric 'jobs'"):
            Counter.no_labels(registry, Name("jobs"), "Jobs")
