"""
Cache manager

Content-addressed TTL cache of analysis results plus the provider health flag.
Backing-store failures never fail a request: reads degrade to a miss and
writes to a no-op.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from truecheck_core.cache.base_cache_store import CacheStore
from truecheck_core.cache.fingerprint import compute_fingerprint
from truecheck_core.cache.memory_store import InMemoryCacheStore
from truecheck_core.detector_config import CacheConfig
from truecheck_core.domain.entities import AnalysisResult, CacheEntry
from truecheck_core.domain.errors import CacheError

logger = logging.getLogger(__name__)

PROVIDER_HEALTH_KEY = "health:llm"


class CacheManager:
    """Result cache and provider health flag"""

    def __init__(
        self,
        config: CacheConfig | None = None,
        store: CacheStore | None = None,
        clock: Callable[[], float] = time.time,
        health_store: CacheStore | None = None,
    ) -> None:
        self.config = config or CacheConfig()
        self._store = store or InMemoryCacheStore(max_entries=self.config.max_entries, clock=clock)
        if health_store is None:
            # A shared backend carries the flag across processes. An in-process
            # LRU would evict it under result writes, so it gets its own slot.
            if isinstance(self._store, InMemoryCacheStore):
                health_store = InMemoryCacheStore(max_entries=1, clock=clock)
            else:
                health_store = self._store
        self._health_store = health_store
        self._clock = clock
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def key_for(self, text: str, language: str) -> str:
        return compute_fingerprint(text, language, self.config.version, self.config.key_length)

    def get(self, text: str, language: str) -> AnalysisResult | None:
        """
        Look up a previous result

        Returns:
            The stored AnalysisResult, or None on a miss (including expired,
            wrong-version, unreadable entries and store failures)
        """
        if not self.config.enabled:
            return None

        key = self.key_for(text, language)
        entry = None
        try:
            data = self._store.get(key)
            if data is not None:
                entry = CacheEntry.from_dict(data)
        except CacheError as e:
            logger.warning("Cache read failed for %s: %s", key[:24], e)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key[:24], e)
            self._safe_delete(key)

        if entry is not None and entry.version != self.config.version:
            entry = None

        with self._lock:
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1

        return entry.result if entry else None

    def set(self, text: str, language: str, result: AnalysisResult) -> None:
        """
        Store a result

        Fallback results are kept for the shorter fallback TTL so the text is
        re-analysed once the provider recovers.
        """
        if not self.config.enabled:
            return

        key = self.key_for(text, language)
        ttl = self.config.fallback_ttl_seconds if result.using_fallback else self.config.ttl_seconds
        entry = CacheEntry(
            result=result,
            stored_at=self._clock(),
            using_fallback=result.using_fallback,
            version=self.config.version,
        )
        try:
            self._store.set(key, entry.to_dict(), ttl)
        except CacheError as e:
            logger.warning("Cache write failed for %s: %s", key[:24], e)

    def get_provider_health(self) -> bool | None:
        """Last recorded LLM health, or None if unknown or expired"""
        try:
            data = self._health_store.get(PROVIDER_HEALTH_KEY)
        except CacheError as e:
            logger.warning("Provider health read failed: %s", e)
            return None
        if data is None:
            return None
        return bool(data.get("healthy"))

    def set_provider_health(self, healthy: bool) -> None:
        try:
            self._health_store.set(
                PROVIDER_HEALTH_KEY,
                {"healthy": healthy, "checked_at": self._clock()},
                self.config.health_ttl_seconds,
            )
        except CacheError as e:
            logger.warning("Provider health write failed: %s", e)

    def invalidate(self, key: str) -> bool:
        """Remove one entry by key (see key_for); returns whether it existed"""
        return self._safe_delete(key)

    def invalidate_text(self, text: str, language: str) -> bool:
        return self._safe_delete(self.key_for(text, language))

    def clear(self) -> None:
        """Remove every entry, including the provider health flag"""
        try:
            self._store.clear()
            if self._health_store is not self._store:
                self._health_store.clear()
        except CacheError as e:
            logger.warning("Cache clear failed: %s", e)

    def stats(self) -> dict:
        try:
            size = self._store.size()
        except CacheError as e:
            logger.warning("Cache size unavailable: %s", e)
            size = -1
        with self._lock:
            hits, misses = self._hits, self._misses
        return {
            "enabled": self.config.enabled,
            "size": size,
            "max_entries": self.config.max_entries,
            "version": self.config.version,
            "backend": self.config.backend,
            "hits": hits,
            "misses": misses,
        }

    def _safe_delete(self, key: str) -> bool:
        try:
            return self._store.delete(key)
        except CacheError as e:
            logger.warning("Cache delete failed for %s: %s", key[:24], e)
            return False
