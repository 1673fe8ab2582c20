"""Tests for the response cache and cached source fetches."""
import asyncio
from datetime import timedelta

import pytest

from scorecard.ingestion import RateLimiter, ResponseCache
from tests.conftest import FakeClock, FakeSource, action


def test_hit_within_ttl_and_lazy_eviction():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=60, clock=clock)
    key = ResponseCache.make_key("congress.gov", {"subject": "A1"})

    cache.put(key, {"data": 1})
    clock.advance(59)
    assert cache.get(key) == {"data": 1}

    clock.advance(1)
    assert cache.get(key) is None
    assert len(cache) == 0
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1
    assert cache.stats()["evictions"] == 1


def test_put_overwrites_entry():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=60, clock=clock)
    cache.put("k", 1)
    clock.advance(50)
    cache.put("k", 2)
    clock.advance(50)
    assert cache.get("k") == 2


def test_disabled_cache_bypasses_reads_and_writes():
    cache = ResponseCache(ttl_seconds=60, enabled=False)
    cache.put("k", {"data": 1})
    assert cache.get("k") is None
    assert len(cache) == 0
    assert cache.stats()["enabled"] is False


def test_key_ignores_parameter_order():
    first = ResponseCache.make_key("s", {"subject": "A1", "start": "2024-01-01"})
    second = ResponseCache.make_key("s", {"start": "2024-01-01", "subject": "A1"})
    assert first == second
    assert first != ResponseCache.make_key("other", {"subject": "A1", "start": "2024-01-01"})


def _fetch_twice(cache, limiter, subject, time_range, between=None):
    source = FakeSource(limiter, cache, items=[action()])

    async def scenario():
        first = await source.fetch_evidence(subject, time_range)
        if between:
            between()
        second = await source.fetch_evidence(subject, time_range)
        return first, second

    first, second = asyncio.run(scenario())
    return source, first, second


def test_same_query_twice_hits_network_once(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source, first, second = _fetch_twice(cache, limiter, subject, time_range)
    assert source.calls == 1
    assert first == second
    assert source.stats["cache_hits"] == 1


def test_same_query_twice_without_cache_hits_network_twice(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, enabled=False, clock=clock)
    source, first, second = _fetch_twice(cache, limiter, subject, time_range)
    assert source.calls == 2
    assert first == second


def test_expired_entry_is_refetched(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source, _, _ = _fetch_twice(cache, limiter, subject, time_range, between=lambda: clock.advance(3600))
    assert source.calls == 2


def test_concurrent_identical_queries_share_one_fetch(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source = FakeSource(limiter, cache, items=[action()], delay=0.01)

    async def scenario():
        return await asyncio.gather(*(source.fetch_evidence(subject, time_range) for _ in range(5)))

    results = asyncio.run(scenario())
    assert source.calls == 1
    assert all(result == results[0] for result in results)


def test_different_subjects_are_cached_separately(limiter, subject, other_subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source = FakeSource(limiter, cache, items=[action()])

    async def scenario():
        await source.fetch_evidence(subject, time_range)
        await source.fetch_evidence(other_subject, time_range)

    asyncio.run(scenario())
    assert source.calls == 2
    assert len(cache) == 2


def test_from_settings(settings):
    cache = ResponseCache.from_settings(settings)
    assert cache.ttl_seconds == 24 * 3600
    assert cache.enabled is True


def test_put_sweeps_expired_entries():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=60, clock=clock)

    for i in range(100):
        cache.put(f"k{i}", i)
        clock.advance(30)

    # Only the two most recent entries are younger than the TTL
    assert len(cache) == 2
    assert cache.stats()["evictions"] == 98


def test_key_locks_are_released_after_use(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source = FakeSource(limiter, cache, items=[action()], delay=0.01)

    async def scenario():
        for day in range(50):
            shifted = time_range.model_copy(update={"end": time_range.end + timedelta(days=day)})
            await asyncio.gather(*(source.fetch_evidence(subject, shifted) for _ in range(3)))
            clock.advance(3600)

    asyncio.run(scenario())

    assert source.calls == 50
    assert len(cache) == 1
    assert cache.stats()["active_locks"] == 0
    assert cache._locks == {}


def test_key_lock_released_when_fetch_is_cancelled(limiter, subject, time_range, clock):
    cache = ResponseCache(ttl_seconds=3600, clock=clock)
    source = FakeSource(limiter, cache, items=[action()], delay=1.0)

    async def scenario():
        await asyncio.wait_for(source.fetch_evidence(subject, time_range), timeout=0.01)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(scenario())

    assert len(cache) == 0
    assert cache._locks == {}
