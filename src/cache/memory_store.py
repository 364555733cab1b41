# src/cache/memory_store.py — v1
"""In-memory reference cache with lazy TTL expiry.

Staleness is checked at read time only; there is no background sweep. An
expired entry stays in place until a fresh fetch overwrites it. Without a
``max_entries`` bound the cache grows for the process lifetime.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from bookfinder.cache.base_reference_cache import BaseReferenceCache
from bookfinder.cache.models import CacheEntry
from bookfinder.core.models import Category

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class InMemoryReferenceCache(BaseReferenceCache):
    """Thread-safe per-category dict cache.

    Args:
        ttl_seconds: Entry lifetime. Entries aged ``>= ttl_seconds`` are misses.
        max_entries: Per-category bound, least recently written evicted first.
            0 means unbounded.
        clock: Time source in seconds. Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._stores: dict[Category, OrderedDict[str, CacheEntry]] = {
            category: OrderedDict() for category in Category
        }

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, category: Category, key: str) -> Any | None:
        with self._lock:
            entry = self._stores[category].get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock(), self._ttl):
            logger.debug("Expired %s entry: %s", category, key)
            return None
        return entry.record

    def put(self, category: Category, key: str, record: Any) -> None:
        entry = CacheEntry(record=record, fetched_at=self._clock())
        with self._lock:
            store = self._stores[category]
            store[key] = entry
            store.move_to_end(key)
            if self._max_entries and len(store) > self._max_entries:
                evicted, _ = store.popitem(last=False)
                logger.debug("Evicted %s entry: %s", category, evicted)

    def clear(self, category: Category | None = None) -> None:
        with self._lock:
            if category is None:
                for store in self._stores.values():
                    store.clear()
            else:
                self._stores[category].clear()

    def size(self, category: Category | None = None) -> int:
        with self._lock:
            if category is None:
                return sum(len(s) for s in self._stores.values())
            return len(self._stores[category])
