"""
InMemoryCacheStore のテスト
"""

import pytest

from truecheck_core.cache.memory_store import InMemoryCacheStore


class FakeClock:
    def __init__(self, now: float = 1_760_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestInMemoryCacheStore:
    """インメモリストアのテスト"""

    def setup_method(self):
        self.clock = FakeClock()
        self.store = InMemoryCacheStore(max_entries=3, clock=self.clock)

    def test_set_and_get(self):
        self.store.set("k", {"v": 1}, 60)
        assert self.store.get("k") == {"v": 1}

    def test_missing_key(self):
        assert self.store.get("nope") is None

    def test_expiry(self):
        self.store.set("k", {"v": 1}, 60)
        self.clock.now += 59
        assert self.store.get("k") == {"v": 1}
        self.clock.now += 1
        assert self.store.get("k") is None
        assert self.store.size() == 0

    def test_lru_eviction(self):
        """最も長く使われていないエントリから追い出される"""
        self.store.set("a", {}, 60)
        self.store.set("b", {}, 60)
        self.store.set("c", {}, 60)
        self.store.get("a")
        self.store.set("d", {}, 60)

        assert self.store.get("b") is None
        assert self.store.get("a") == {}
        assert self.store.size() == 3

    def test_overwrite_refreshes_ttl(self):
        self.store.set("k", {"v": 1}, 10)
        self.clock.now += 5
        self.store.set("k", {"v": 2}, 10)
        self.clock.now += 8
        assert self.store.get("k") == {"v": 2}

    def test_delete(self):
        self.store.set("k", {}, 60)
        assert self.store.delete("k") is True
        assert self.store.delete("k") is False

    def test_clear(self):
        self.store.set("a", {}, 60)
        self.store.set("b", {}, 60)
        self.store.clear()
        assert self.store.size() == 0

    def test_purge_expired(self):
        self.store.set("short", {}, 10)
        self.store.set("long", {}, 100)
        self.clock.now += 50
        assert self.store.purge_expired() == 1
        assert self.store.size() == 1

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError, match="max_entries"):
            InMemoryCacheStore(max_entries=0)
