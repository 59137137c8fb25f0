"""Tests for execution contexts and handle substitution via map_k.

Coverage:
- SYNC runs immediately; ASYNC defers until awaited
- map_k on every kind and both handle shapes, same backend child, no re-registration
- Identity transformation preserves behavior
- Composition: two map_k steps == one map_k with the composed transformation
- Source/target mismatches rejected
"""

from __future__ import annotations

import asyncio

import pytest

from qortex_metrics import (
    ASYNC,
    SYNC,
    Counter,
    Gauge,
    Histogram,
    Label,
    Name,
    NaturalTransformation,
    Summary,
    sync_to_async,
)
from qortex_metrics.unsafe import as_backend, as_backend_unlabelled


def _recording(log: list) -> NaturalTransformation:
    """SYNC ~> SYNC transformation that notes every value passing through."""

    def fn(fa):
        log.append(fa)
        return fa

    return NaturalTransformation(SYNC, SYNC, fn)


# =============================================================================
# Effects
# =============================================================================


class TestEffects:
    def test_sync_delay_runs_now(self):
        ran = []
        assert SYNC.delay(lambda: ran.append(1) or "x") == "x"
        assert ran == [1]

    def test_async_delay_runs_when_awaited(self):
        ran = []
        pending = ASYNC.delay(lambda: ran.append(1) or "x")
        assert ran == []
        assert asyncio.run(pending) == "x"
        assert ran == [1]

    def test_async_counter_is_lazy(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs", effect=ASYNC)
        pending = jobs.inc()
        assert registry.sample_value("jobs_total") == 0.0
        asyncio.run(pending)
        assert registry.sample_value("jobs_total") == 1.0


# =============================================================================
# NaturalTransformation
# =============================================================================


class TestNaturalTransformation:
    def test_identity(self):
        fk = NaturalTransformation.identity(SYNC)
        assert fk(5) == 5
        assert fk.source is SYNC and fk.target is SYNC

    def test_and_then_composes_in_order(self):
        log: list = []
        fk = _recording(log).and_then(sync_to_async())
        assert fk.source is SYNC and fk.target is ASYNC
        assert asyncio.run(fk("v")) == "v"
        assert log == ["v"]

    def test_compose_is_and_then_reversed(self):
        f = NaturalTransformation(SYNC, SYNC, lambda x: x + 1)
        g = NaturalTransformation(SYNC, SYNC, lambda x: x * 10)
        assert g.compose(f)(1) == f.and_then(g)(1) == 20

    def test_mismatched_composition_rejected(self):
        with pytest.raises(TypeError, match="compose"):
            sync_to_async().and_then(_recording([]))

    def test_map_k_rejects_wrong_source(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs")
        from_async = NaturalTransformation(ASYNC, SYNC, lambda fa: fa)
        with pytest.raises(TypeError):
            jobs.map_k(from_async)

    def test_map_k_rejects_plain_callable(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs")
        with pytest.raises(TypeError):
            jobs.map_k(lambda fa: fa)  # type: ignore[arg-type]


# =============================================================================
# map_k on handles
# =============================================================================


class TestMapK:
    def test_identity_preserves_behavior(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs")
        same = jobs.map_k(NaturalTransformation.identity(SYNC))
        same.inc()
        jobs.inc()
        assert registry.sample_value("jobs_total") == 2.0
        assert as_backend(same) is as_backend(jobs)

    def test_sync_to_async_counter(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs")
        ajobs = jobs.map_k(sync_to_async())
        assert ajobs.effect is ASYNC

        async def run():
            await ajobs.inc()
            await ajobs.inc_by(2)

        asyncio.run(run())
        assert registry.sample_value("jobs_total") == 3.0

    def test_gauge_every_operation(self, registry):
        log: list = []
        g = Gauge.no_labels(registry, Name("depth"), "Depth").map_k(_recording(log))
        g.set(10)
        g.inc()
        g.inc_by(2)
        g.dec()
        g.dec_by(3)
        g.set_to_current_time()
        assert len(log) == 6
        assert registry.sample_value("depth") > 1_000_000

    def test_histogram_and_summary(self, registry):
        h = Histogram.no_labels(registry, Name("h"), "h").map_k(sync_to_async())
        s = Summary.no_labels(registry, Name("s"), "s").map_k(sync_to_async())

        async def run():
            await h.observe(1.0)
            await s.observe(2.0)

        asyncio.run(run())
        assert registry.sample_value("h_count") == 1.0
        assert registry.sample_value("s_sum") == 2.0

    def test_unlabelled_family_addresses_same_child(self, registry):
        requests = Counter.labelled(
            registry, Name("requests"), "Requests", (Label("path"),), lambda p: (p,)
        )
        arequests = requests.map_k(sync_to_async())
        assert arequests.effect is ASYNC
        handle = arequests.label("/a")
        assert handle.effect is ASYNC

        asyncio.run(handle.inc())
        requests.label("/a").inc()
        assert registry.sample_value("requests_total", {"path": "/a"}) == 2.0
        assert as_backend_unlabelled(arequests) is as_backend_unlabelled(requests)
        assert handle.base.child is requests.label("/a").child

    def test_no_re_registration(self, registry):
        jobs = Counter.no_labels(registry, Name("jobs"), "Jobs")
        before = registry.registered_names()
        jobs.map_k(sync_to_async()).map_k(NaturalTransformation.identity(ASYNC))
        assert registry.registered_names() == before

    @pytest.mark.parametrize("kind", ["counter", "gauge", "histogram", "summary"])
    def test_chained_equals_composed(self, registry, kind):
        log_chained: list = []
        log_composed: list = []

        def build(name):
            if kind == "counter":
                return Counter.no_labels(registry, Name(name), "c"), lambda h: h.inc()
            if kind == "gauge":
                return Gauge.no_labels(registry, Name(name), "g"), lambda h: h.inc()
            if kind == "histogram":
                return Histogram.no_labels(registry, Name(name), "h"), lambda h: h.observe(1.0)
            return Summary.no_labels(registry, Name(name), "s"), lambda h: h.observe(1.0)

        first, op = build("chained")
        second, _ = build("composed")
        chained = first.map_k(_recording(log_chained)).map_k(sync_to_async())
        composed = second.map_k(_recording(log_composed).and_then(sync_to_async()))

        asyncio.run(op(chained))
        asyncio.run(op(composed))
        assert log_chained == log_composed == [None]
        assert as_backend(chained) is as_backend(first)
        assert as_backend(composed) is as_backend(second)

    def test_timed_through_map_k_uses_target_context(self, registry, clock, async_effect):
        h = Histogram.no_labels(registry, Name("job_seconds"), "Job")
        ah = h.map_k(sync_to_async(async_effect))

        async def work():
            clock.advance(4.0)
            return "ok"

        assert asyncio.run(ah.timed_seconds(work())) == "ok"
        assert registry.sample_value("job_seconds_sum") == 4.0
