"""Tests for Gauge families."""

from __future__ import annotations

import time

import pytest

from qortex_metrics import Gauge, Label, Name, RegistrationError


class TestNoLabelsGauge:
    def test_up_and_down(self, registry):
        g = Gauge.no_labels(registry, Name("queue_depth"), "Queue depth")
        g.inc()
        g.inc_by(4)
        g.dec()
        g.dec_by(0.5)
        assert registry.sample_value("queue_depth") == 3.5

    def test_set(self, registry):
        g = Gauge.no_labels(registry, Name("temperature"), "Temperature")
        g.set(-12.5)
        assert registry.sample_value("temperature") == -12.5

    def test_set_to_current_time(self, registry):
        g = Gauge.no_labels(registry, Name("last_run"), "Last run")
        before = time.time()
        g.set_to_current_time()
        value = registry.sample_value("last_run")
        assert value is not None
        assert before - 1 <= value <= time.time() + 1


class TestLabelledGauge:
    def test_children_are_independent(self, registry):
        pools = Gauge.labelled(
            registry, Name("pool_size"), "Pool size", (Label("pool"),), lambda p: (p,)
        )
        pools.label("db").set(10)
        pools.label("cache").set(3)
        pools.label("db").dec()
        assert registry.sample_value("pool_size", {"pool": "db"}) == 9.0
        assert registry.sample_value("pool_size", {"pool": "cache"}) == 3.0

    def test_duplicate_name_across_kinds_fails(self, registry):
        Gauge.no_labels(registry, Name("shared"), "first")
        with pytest.raises(RegistrationError):
            Gauge.labelled(registry, Name("shared"), "second", (Label("a"),), lambda a: (a,))
