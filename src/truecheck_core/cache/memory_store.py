"""
In-process cache store

LRU by access order, bounded by max_entries, with per-entry expiry.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable

from truecheck_core.cache.base_cache_store import CacheStore


class InMemoryCacheStore(CacheStore):
    """Thread-safe in-memory store"""

    def __init__(self, max_entries: int = 1000, clock: Callable[[], float] = time.time) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1.")
        self.max_entries = max_entries
        self._clock = clock
        self._data: OrderedDict[str, tuple[dict, float]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> dict | None:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return value

    def set(self, key: str, value: dict, ttl_seconds: float) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + ttl_seconds)
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def purge_expired(self) -> int:
        """Drop expired entries; returns how many were removed"""
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, expires_at) in self._data.items() if now >= expires_at]
            for key in expired:
                del self._data[key]
            return len(expired)
