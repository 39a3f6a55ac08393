"""In-process TTL cache for upstream pages.

Entries are keyed by the exact request URL and replaced whole, never
mutated. Expired entries are evicted on the next lookup of their key and
swept on every write; with ``max_entries`` set, the least recently written
entry is dropped once the cache is full. The cache is shared by coroutines
on a single event loop, so it carries no lock; a multi-threaded caller
must wrap it or shard it per key.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Protocol


class ResponseCache(Protocol):
    def get(self, key: Hashable) -> Any | None: ...

    def set(self, key: Hashable, payload: Any) -> None: ...


@dataclass(slots=True, frozen=True)
class CacheEntry:
    key: Hashable
    payload: Any
    stored_at: float


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._data: dict[Hashable, CacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: Hashable) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            self._data.pop(key, None)
            return None
        return entry.payload

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self._ttl

    def sweep(self) -> int:
        """Drop every expired entry and return how many were dropped."""

        now = self._clock()
        stale = [key for key, entry in self._data.items() if self._expired(entry, now)]
        for key in stale:
            del self._data[key]
        return len(stale)

    def set(self, key: Hashable, payload: Any) -> None:
        self.sweep()
        self._data.pop(key, None)
        self._data[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        if self._max_entries is not None:
            while len(self._data) > self._max_entries:
                del self._data[next(iter(self._data))]

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
