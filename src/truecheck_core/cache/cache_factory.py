"""
Factory for cache store instantiation
"""

from __future__ import annotations

from truecheck_core.cache.base_cache_store import CacheStore
from truecheck_core.detector_config import CacheConfig


def create_cache_store(config: CacheConfig | None = None) -> CacheStore:
    """
    Instantiate the configured cache backend

    Args:
        config: Cache configuration. Defaults to the in-memory backend.

    Returns:
        Configured CacheStore implementation
    """
    config = config or CacheConfig()

    if config.backend == "memory":
        from truecheck_core.cache.memory_store import InMemoryCacheStore
        return InMemoryCacheStore(max_entries=config.max_entries)

    if config.backend == "redis":
        from truecheck_core.cache.redis_store import RedisCacheStore
        if not config.redis_url:
            raise ValueError("REDIS_URL must be set when DETECTOR_CACHE_BACKEND=redis")
        return RedisCacheStore(redis_url=config.redis_url)

    raise ValueError(f"Unsupported cache backend: {config.backend!r}")
