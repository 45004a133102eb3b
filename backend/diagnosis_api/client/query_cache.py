"""Query Cache — keyed read cache with stale times, shared in-flight fetches and invalidation.

Invariants:
    - A value is served from cache only while younger than its stale_after
    - Concurrent get_or_fetch() calls for one key await a single fetch
    - invalidate(prefix) marks every key starting with `prefix` stale; a fetch
      that started before the invalidation stores its value already stale
    - A failed fetch caches nothing and the error reaches every waiter
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable

CacheKey = tuple[Hashable, ...]


@dataclass
class _Entry:
    value: Any = None
    fetched_at: float | None = None
    generation: int = 0
    stale: bool = True


class QueryCache:
    """In-memory cache for data-client reads."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._inflight: dict[CacheKey, asyncio.Future] = {}

    def _is_fresh(self, entry: _Entry, stale_after: float) -> bool:
        return (
            not entry.stale
            and entry.fetched_at is not None
            and self._clock() - entry.fetched_at < stale_after
        )

    def peek(self, key: CacheKey) -> Any:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: CacheKey, value: Any) -> None:
        """Prime an entry as freshly fetched."""
        entry = self._entries.setdefault(key, _Entry())
        entry.value = value
        entry.fetched_at = self._clock()
        entry.stale = False

    async def get_or_fetch(
        self,
        key: CacheKey,
        stale_after: float,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry, stale_after):
            return entry.value
        if key in self._inflight:
            return await asyncio.shield(self._inflight[key])

        entry = self._entries.setdefault(key, _Entry())
        generation = entry.generation
        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await fetch()
        except Exception as e:
            future.set_exception(e)
            future.exception()  # marks it retrieved when nobody else waits
            raise
        else:
            entry.value = value
            entry.fetched_at = self._clock()
            entry.stale = entry.generation != generation
            future.set_result(value)
            return value
        finally:
            if not future.done():
                future.cancel()
            self._inflight.pop(key, None)

    def invalidate(self, prefix: CacheKey) -> int:
        """Mark every entry whose key starts with `prefix` stale. Returns the count."""
        count = 0
        for key, entry in self._entries.items():
            if key[:len(prefix)] == prefix:
                entry.stale = True
                entry.generation += 1
                count += 1
        return count

    def clear(self) -> None:
        self._entries.clear()
