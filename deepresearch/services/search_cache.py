"""In-memory, time-expiring cache of search responses keyed by normalized query."""

from __future__ import annotations

import asyncio
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from deepresearch.config import settings
from deepresearch.models.research import SearchResponse


def normalize_query(query: str) -> str:
    return re.sub(r"\s+", " ", query.strip().lower())


@dataclass(frozen=True, slots=True)
class CacheEntry:
    query: str
    response: SearchResponse
    stored_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    max_size: int
    ttl_seconds: float
    hits: int
    misses: int


class SearchCache:
    """Query -> SearchResponse store with lazy TTL expiry and insertion-order eviction.

    Reads never refresh an entry's position, so eviction removes the entry
    that was inserted (or last re-set) longest ago. Safe to share between
    concurrent research runs, including runs on different threads.
    """

    def __init__(
        self,
        ttl_seconds: float = 600.0,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def get(self, query: str) -> SearchResponse | None:
        key = normalize_query(query)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
        logger.debug(f"Cache hit for query: {query!r}")
        return entry.response

    def set(self, query: str, response: SearchResponse) -> None:
        key = normalize_query(query)
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted oldest query: {evicted!r}")
            self._entries[key] = CacheEntry(query=key, response=response, stored_at=self._clock())
        logger.debug(f"Cache stored results for query: {query!r}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Cache cleared")

    def clear_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_size=self.max_entries,
                ttl_seconds=self.ttl_seconds,
                hits=self._hits,
                misses=self._misses,
            )

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Remove expired entries every ``interval_seconds`` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.clear_expired()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: object) -> bool:
        if not isinstance(query, str):
            return False
        with self._lock:
            entry = self._entries.get(normalize_query(query))
            return entry is not None and not self._is_expired(entry, self._clock())


_cache: SearchCache | None = None


def get_search_cache() -> SearchCache:
    global _cache
    if _cache is None:
        _cache = SearchCache(
            ttl_seconds=float(settings.search_cache_ttl_seconds),
            max_entries=max(int(settings.search_cache_max_entries), 1),
        )
    return _cache
