"""Expiring in-memory cache for fetched market data."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable


@dataclass(frozen=True, slots=True)
class CacheEntry:
    data: Any
    created_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.created_at <= self.ttl


class TTLCache:
    """Key/value store where every entry carries its own time-to-live.

    Expired entries are evicted lazily on read; there is no background sweep
    and no size bound. Entries are replaced wholesale on set(), never mutated.

    Writers: QuoteRouter, ChartRouter, MFAPIClient.
    Readers: the same routers on their next lookup.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._clock = clock

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key for ttl seconds, overwriting any prior entry."""
        with self._lock:
            self._entries[key] = CacheEntry(data=value, created_at=self._clock(), ttl=ttl)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss.

        A stale entry is removed as a side effect, so repeated reads of an
        expired key keep missing.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock()):
                del self._entries[key]
                return None
            return entry.data

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        # Peek without evicting
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.is_fresh(self._clock())
