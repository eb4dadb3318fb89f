"""
Abstract cache store interface

Stores hold JSON-serializable dictionaries; conversion to domain objects is
the cache manager's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Unified interface for cache storage backends"""

    @abstractmethod
    def get(self, key: str) -> dict | None:
        """Retrieve a live value, or None if missing or expired"""

    @abstractmethod
    def set(self, key: str, value: dict, ttl_seconds: float) -> None:
        """Store a value that expires after ttl_seconds"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a value; returns whether it existed"""

    @abstractmethod
    def clear(self) -> None:
        """Remove every value"""

    @abstractmethod
    def size(self) -> int:
        """Number of stored values"""
