"""
Redis-based cache store (DETECTOR_CACHE_BACKEND=redis)

Requires the 'redis' package: pip install truecheck-core[redis].
Shares cache and provider health across instances; expiry is native (SETEX).
"""

from __future__ import annotations

import json
import logging

from truecheck_core.cache.base_cache_store import CacheStore
from truecheck_core.domain.errors import CacheError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "truecheck:"


class RedisCacheStore(CacheStore):
    """Redis-backed cache store for multi-instance deployments"""

    def __init__(self, redis_url: str, key_prefix: str = _KEY_PREFIX, client=None) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install truecheck-core[redis]"
            ) from e

        self._redis_error = redis.RedisError
        self._prefix = key_prefix
        self._client = client or redis.Redis.from_url(redis_url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> dict | None:
        try:
            data = self._client.get(self._key(key))
        except self._redis_error as e:
            raise CacheError(f"Redis GET failed: {e}") from e
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    def set(self, key: str, value: dict, ttl_seconds: float) -> None:
        try:
            self._client.setex(self._key(key), max(int(ttl_seconds), 1), json.dumps(value, ensure_ascii=False))
        except self._redis_error as e:
            raise CacheError(f"Redis SETEX failed: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(self._key(key)))
        except self._redis_error as e:
            raise CacheError(f"Redis DEL failed: {e}") from e

    def clear(self) -> None:
        try:
            keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
            if keys:
                self._client.delete(*keys)
        except self._redis_error as e:
            raise CacheError(f"Redis clear failed: {e}") from e

    def size(self) -> int:
        try:
            return sum(1 for _ in self._client.scan_iter(match=f"{self._prefix}*"))
        except self._redis_error as e:
            raise CacheError(f"Redis scan failed: {e}") from e

    def close(self) -> None:
        """Close the Redis connection"""
        self._client.close()
