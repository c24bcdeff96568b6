"""Tests for GeocodeDispatcher — throttle, FIFO order, deferred release."""

from __future__ import annotations

import pytest

from geo_resolver.adapters.cache.adaptive_cache import AdaptiveCache
from geo_resolver.application.use_cases.dispatch_geocode import GeocodeDispatcher
from geo_resolver.domain.entities.geocode_query import GeocodeQuery
from geo_resolver.domain.errors import TransportError


def _make_dispatcher(provider, max_concurrent: int = 6, cache: AdaptiveCache | None = None):
    cache = cache if cache is not None else AdaptiveCache(max_size=100, overflow=0)
    return GeocodeDispatcher(provider=provider, cache=cache, max_concurrent=max_concurrent), cache


class Recorder:
    def __init__(self):
        self.results: dict[str, object] = {}

    def for_(self, text: str):
        def _completion(location):
            self.results[text] = location

        return _completion


# ─── Throttle / FIFO ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_six_dispatch_immediately_four_stay_queued(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=6)
    rec = Recorder()
    addresses = [f"{i} Pine St" for i in range(10)]

    for address in addresses:
        dispatcher.submit(GeocodeQuery(address), rec.for_(address))

    assert provider.requests == addresses[:6]
    assert dispatcher.active_count == 6
    assert dispatcher.queue_size == 4

    # Completions arrive out of order; queued items still go out in submission order
    provider.finish(addresses[3])
    await settle()
    assert provider.requests == addresses[:7]

    provider.finish(addresses[0])
    provider.finish(addresses[5])
    await settle()
    assert provider.requests == addresses[:9]
    assert dispatcher.active_count == 6

    for address in [addresses[1], addresses[2], addresses[4], addresses[6]]:
        provider.finish(address)
    await settle()
    assert provider.requests == addresses
    assert dispatcher.queue_size == 0

    for address in addresses[7:]:
        provider.finish(address)
    await settle()
    assert dispatcher.active_count == 0
    assert set(rec.results) == set(addresses)


@pytest.mark.asyncio
async def test_queued_items_dispatch_in_submission_order(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    rec = Recorder()

    for address in ["Q0", "Q1", "Q2", "Q3"]:
        dispatcher.submit(GeocodeQuery(address), rec.for_(address))
    assert provider.requests == ["Q0"]

    provider.finish("Q0")
    await settle()
    assert provider.requests == ["Q0", "Q1"]

    provider.finish("Q1")
    await settle()
    assert provider.requests == ["Q0", "Q1", "Q2"]


@pytest.mark.asyncio
async def test_active_count_never_exceeds_cap(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=3)
    rec = Recorder()
    addresses = [f"addr {i}" for i in range(12)]

    for address in addresses:
        dispatcher.submit(GeocodeQuery(address), rec.for_(address))
        assert dispatcher.active_count <= 3

    while len(rec.results) < len(addresses):
        in_flight = [a for a in provider.requests if a not in rec.results]
        provider.finish(in_flight[0])
        await settle()
        assert 0 <= dispatcher.active_count <= 3

    assert dispatcher.active_count == 0


@pytest.mark.asyncio
async def test_release_is_deferred_past_completion(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    seen_active = []

    dispatcher.submit(GeocodeQuery("A"), lambda loc: seen_active.append(dispatcher.active_count))
    dispatcher.submit(GeocodeQuery("B"), lambda loc: None)

    provider.finish("A")
    await settle(1)
    # Completion ran while the slot was still held; B not dispatched from inside it
    assert seen_active == [1]

    await settle()
    assert provider.requests == ["A", "B"]
    assert dispatcher.active_count == 1


# ─── Cache interplay ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_cache_hit_completes_without_queueing(provider, settle):
    dispatcher, cache = _make_dispatcher(provider)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("1 Main St"), rec.for_("first"))
    provider.finish("1 Main St", {"lat": 10.0, "lon": 20.0})
    await settle()

    dispatcher.submit(GeocodeQuery("1 MAIN ST"), rec.for_("second"))

    assert provider.requests == ["1 Main St"]
    assert rec.results["second"].latitude == 10.0
    assert rec.results["second"].address == "1 MAIN ST"
    assert cache.lookup("1 main st").query.hit_count == 2


@pytest.mark.asyncio
async def test_dispatch_time_cache_hit_skips_provider(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("Elm St"), rec.for_("Elm St"))
    dispatcher.submit(GeocodeQuery("ELM ST"), rec.for_("ELM ST"))
    assert dispatcher.queue_size == 1

    provider.finish("Elm St", {"lat": 3.0, "lon": 4.0})
    await settle()

    assert provider.requests == ["Elm St"]
    assert rec.results["ELM ST"].address == "ELM ST"
    assert rec.results["ELM ST"].latitude == 3.0
    assert dispatcher.active_count == 0


# ─── Failure paths ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_empty_result_completes_with_none_and_caches_nothing(provider, settle):
    dispatcher, cache = _make_dispatcher(provider)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("Nowhere"), rec.for_("Nowhere"))
    provider.finish_empty("Nowhere")
    await settle()

    assert "Nowhere" in rec.results
    assert rec.results["Nowhere"] is None
    assert cache.size() == 0
    assert dispatcher.active_count == 0


@pytest.mark.asyncio
async def test_transport_error_is_not_negatively_cached(provider, settle):
    dispatcher, cache = _make_dispatcher(provider)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("Flaky Rd"), rec.for_("first"))
    provider.fail("Flaky Rd", TransportError("Azure Maps HTTP 503", status_code=503))
    await settle()
    assert rec.results["first"] is None
    assert cache.size() == 0

    dispatcher.submit(GeocodeQuery("Flaky Rd"), rec.for_("second"))
    assert provider.requests == ["Flaky Rd", "Flaky Rd"]


@pytest.mark.asyncio
async def test_unexpected_provider_error_still_releases_slot(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("Bad"), rec.for_("Bad"))
    dispatcher.submit(GeocodeQuery("Next"), rec.for_("Next"))
    provider.fail("Bad", RuntimeError("boom"))
    await settle()

    assert rec.results["Bad"] is None
    assert provider.requests == ["Bad", "Next"]


@pytest.mark.asyncio
async def test_build_request_error_propagates_and_frees_slot(provider):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=2)

    def _broken(query):
        raise ValueError("bad endpoint")

    provider.build_request = _broken

    with pytest.raises(ValueError, match="bad endpoint"):
        dispatcher.submit(GeocodeQuery("X"), lambda loc: None)
    assert dispatcher.active_count == 0


@pytest.mark.asyncio
async def test_unbuildable_queued_request_completes_and_draining_continues(provider, settle):
    """A queued item whose request cannot be built is completed with None
    when it is dispatched from a deferred release, and the items behind it
    still go out."""
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    rec = Recorder()
    build = provider.build_request

    def _fails_for_b(query):
        if query.text == "B":
            raise ValueError("bad endpoint")
        return build(query)

    provider.build_request = _fails_for_b

    for address in ["A", "B", "C"]:
        dispatcher.submit(GeocodeQuery(address), rec.for_(address))
    assert dispatcher.queue_size == 2

    provider.finish("A")
    await settle()

    assert rec.results["B"] is None
    assert provider.requests == ["A", "C"]
    assert dispatcher.active_count == 1
    assert dispatcher.queue_size == 0

    provider.finish("C")
    await settle()
    assert rec.results["C"] is not None
    assert dispatcher.active_count == 0


@pytest.mark.asyncio
async def test_submit_error_does_not_strand_other_queued_items(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    build = provider.build_request

    def _fails_for_x(query):
        if query.text == "X":
            raise ValueError("bad endpoint")
        return build(query)

    provider.build_request = _fails_for_x

    with pytest.raises(ValueError, match="bad endpoint"):
        dispatcher.submit(GeocodeQuery("X"), lambda loc: None)
    dispatcher.submit(GeocodeQuery("Y"), lambda loc: None)

    assert provider.requests == ["Y"]
    assert dispatcher.active_count == 1


# ─── Clear / release ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_clear_drops_queue_and_ignores_stale_releases(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)
    rec = Recorder()

    dispatcher.submit(GeocodeQuery("In flight"), rec.for_("In flight"))
    dispatcher.submit(GeocodeQuery("Queued"), rec.for_("Queued"))

    dispatcher.clear()
    assert dispatcher.queue_size == 0
    assert dispatcher.active_count == 0

    provider.finish("In flight")
    await settle()

    assert "In flight" in rec.results
    assert "Queued" not in rec.results
    assert dispatcher.active_count == 0


@pytest.mark.asyncio
async def test_clear_cancels_pending_release(provider, settle):
    dispatcher, _ = _make_dispatcher(provider, max_concurrent=1)

    dispatcher.submit(GeocodeQuery("A"), lambda loc: None)
    provider.finish("A")
    await settle(1)  # task finished, release scheduled but not yet run

    dispatcher.clear()
    dispatcher.submit(GeocodeQuery("B"), lambda loc: None)
    await settle()

    assert dispatcher.active_count == 1


def test_release_clamps_at_zero(provider):
    dispatcher, _ = _make_dispatcher(provider)
    dispatcher.release(3)
    assert dispatcher.active_count == 0


def test_rejects_non_positive_cap(provider):
    with pytest.raises(ValueError, match="at least 1"):
        GeocodeDispatcher(provider=provider, cache=AdaptiveCache(10), max_concurrent=0)
