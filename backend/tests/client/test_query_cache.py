"""QueryCache — stale times, shared in-flight fetches, prefix invalidation."""

import asyncio

import pytest

from diagnosis_api.client.query_cache import QueryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class CountingFetch:
    """Returns "value-N" on the Nth call; optionally blocks until released."""

    def __init__(self, gate: asyncio.Event | None = None):
        self.calls = 0
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        n = self.calls
        if self.gate is not None:
            await self.gate.wait()
        return f"value-{n}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(clock=clock)


async def test_fresh_value_is_served_from_cache(cache, clock):
    fetch = CountingFetch()
    assert await cache.get_or_fetch(("k",), 60, fetch) == "value-1"
    clock.now += 59
    assert await cache.get_or_fetch(("k",), 60, fetch) == "value-1"
    assert fetch.calls == 1


async def test_stale_value_is_refetched(cache, clock):
    fetch = CountingFetch()
    await cache.get_or_fetch(("k",), 60, fetch)
    clock.now += 60
    assert await cache.get_or_fetch(("k",), 60, fetch) == "value-2"


async def test_concurrent_reads_share_one_fetch(cache):
    gate = asyncio.Event()
    fetch = CountingFetch(gate)
    first = asyncio.create_task(cache.get_or_fetch(("k",), 60, fetch))
    second = asyncio.create_task(cache.get_or_fetch(("k",), 60, fetch))
    await asyncio.sleep(0)
    gate.set()
    assert await first == "value-1"
    assert await second == "value-1"
    assert fetch.calls == 1


async def test_invalidate_by_prefix(cache):
    fetch = CountingFetch()
    await cache.get_or_fetch(("history", "a", 1, 10), 60, fetch)
    await cache.get_or_fetch(("history", "a", 2, 10), 60, fetch)
    await cache.get_or_fetch(("history", "b", 1, 10), 60, fetch)

    assert cache.invalidate(("history", "a")) == 2
    assert await cache.get_or_fetch(("history", "a", 1, 10), 60, fetch) == "value-4"
    assert await cache.get_or_fetch(("history", "b", 1, 10), 60, fetch) == "value-3"


async def test_invalidated_during_fetch_is_stored_stale(cache):
    gate = asyncio.Event()
    fetch = CountingFetch(gate)
    task = asyncio.create_task(cache.get_or_fetch(("k",), 60, fetch))
    await asyncio.sleep(0)
    cache.invalidate(("k",))
    gate.set()
    assert await task == "value-1"

    fetch.gate = None
    assert await cache.get_or_fetch(("k",), 60, fetch) == "value-2"


async def test_failed_fetch_caches_nothing(cache):
    async def boom():
        raise RuntimeError("unreachable")

    with pytest.raises(RuntimeError):
        await cache.get_or_fetch(("k",), 60, boom)
    assert cache.peek(("k",)) is None
    assert await cache.get_or_fetch(("k",), 60, CountingFetch()) == "value-1"


async def test_failed_fetch_reaches_waiters(cache):
    gate = asyncio.Event()

    async def boom():
        await gate.wait()
        raise RuntimeError("unreachable")

    first = asyncio.create_task(cache.get_or_fetch(("k",), 60, boom))
    second = asyncio.create_task(cache.get_or_fetch(("k",), 60, boom))
    await asyncio.sleep(0)
    gate.set()
    with pytest.raises(RuntimeError):
        await first
    with pytest.raises(RuntimeError):
        await second


async def test_set_primes_a_fresh_entry(cache):
    cache.set(("k",), "primed")
    fetch = CountingFetch()
    assert await cache.get_or_fetch(("k",), 60, fetch) == "primed"
    assert fetch.calls == 0


def test_clear_drops_entries(cache):
    cache.set(("k",), "v")
    cache.clear()
    assert cache.peek(("k",)) is None
