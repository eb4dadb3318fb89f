"""
Cache sub-package

Provides the result cache, its fingerprint and the backing stores.
"""

from truecheck_core.cache.base_cache_store import CacheStore
from truecheck_core.cache.cache_factory import create_cache_store
from truecheck_core.cache.cache_manager import PROVIDER_HEALTH_KEY, CacheManager
from truecheck_core.cache.fingerprint import compute_fingerprint
from truecheck_core.cache.memory_store import InMemoryCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "create_cache_store",
    "CacheManager",
    "PROVIDER_HEALTH_KEY",
    "compute_fingerprint",
]
