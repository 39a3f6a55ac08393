from __future__ import annotations

import asyncio

import pytest

from catalog.cache import TTLCache
from catalog.cancellation import CancellationToken, FetchCancelled


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_cache_serves_fresh_entries_and_evicts_lazily():
    clock = FakeClock()
    cache = TTLCache(300, clock=clock)
    cache.set("https://tickets.test/v1/events?page=1", {"events": [1]})

    clock.now += 299
    assert cache.get("https://tickets.test/v1/events?page=1") == {"events": [1]}
    assert len(cache) == 1

    clock.now += 1
    assert cache.get("https://tickets.test/v1/events?page=1") is None
    assert len(cache) == 0


def test_cache_set_replaces_whole_entry():
    clock = FakeClock()
    cache = TTLCache(10, clock=clock)
    cache.set("key", {"events": [1]})
    clock.now += 8
    cache.set("key", {"events": [2]})
    clock.now += 8
    assert cache.get("key") == {"events": [2]}
    assert "key" in cache
    assert "other" not in cache



def test_write_sweeps_expired_entries():
    clock = FakeClock()
    cache = TTLCache(10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    clock.now += 10
    cache.set("c", 3)
    assert len(cache) == 1
    assert cache.sweep() == 0


def test_max_entries_drops_least_recently_written():
    cache = TTLCache(60, clock=FakeClock(), max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)
    assert len(cache) == 2
    assert cache.get("a") == 10
    assert cache.get("b") is None
    assert cache.get("c") == 3

@pytest.mark.asyncio
async def test_guard_returns_result_when_not_cancelled():
    token = CancellationToken()

    async def work() -> str:
        await asyncio.sleep(0)
        return "done"

    assert await token.guard(work()) == "done"


@pytest.mark.asyncio
async def test_guard_aborts_in_flight_work_when_token_fires():
    token = CancellationToken()
    started = asyncio.Event()
    finished = False

    async def slow() -> None:
        nonlocal finished
        started.set()
        await asyncio.sleep(10)
        finished = True

    guarded = asyncio.ensure_future(token.guard(slow()))
    await started.wait()
    token.cancel()

    with pytest.raises(FetchCancelled):
        await guarded
    assert finished is False


@pytest.mark.asyncio
async def test_guard_skips_work_once_cancelled():
    token = CancellationToken()
    token.cancel()
    calls = []

    async def work() -> None:
        calls.append("called")

    with pytest.raises(FetchCancelled):
        await token.guard(work())
    assert calls == []
