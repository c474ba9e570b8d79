"""Tests for the in-memory cache and eviction policies."""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from trip_planner.adapters.cache import FifoEviction, InMemoryCache, NeverEvict, NullCache


class TestInMemoryCache:
    """Test suite for InMemoryCache."""

    def test_set_and_get(self):
        """Stored values are returned until cleared."""
        cache = InMemoryCache(name="test")
        cache.set("jaipur", "city")
        assert cache.get("jaipur") == "city"
        assert cache.clear() == 1
        assert cache.get("jaipur") is None

    def test_missing_key_counts_as_miss(self):
        """A miss is reflected in the stats."""
        cache = InMemoryCache(name="test")
        assert cache.get("nowhere") is None
        assert cache.stats()["misses"] == 1

    def test_ttl_expiry(self):
        """Entries past their TTL are dropped on read."""
        cache = InMemoryCache(name="test", default_ttl_seconds=10)
        with patch("trip_planner.adapters.cache.memory_cache.time.time", return_value=1000.0):
            cache.set("k", "v")
        with patch("trip_planner.adapters.cache.memory_cache.time.time", return_value=1011.0):
            assert cache.get("k") is None
        assert cache.size() == 0

    def test_get_or_compute_caches_hits(self):
        """The compute function runs once per key."""
        cache = InMemoryCache(name="test")
        compute = MagicMock(return_value="Jaipur")
        assert cache.get_or_compute("jaipur", compute) == "Jaipur"
        assert cache.get_or_compute("jaipur", compute) == "Jaipur"
        compute.assert_called_once()
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["hit_rate_percent"] == 50.0

    def test_get_or_compute_does_not_cache_none(self):
        """Failed lookups are retried on the next call."""
        cache = InMemoryCache(name="test")
        compute = MagicMock(return_value=None)
        assert cache.get_or_compute("atlantis", compute) is None
        assert cache.get_or_compute("atlantis", compute) is None
        assert compute.call_count == 2
        assert cache.size() == 0

    def test_invalidate(self):
        """Invalidate reports whether the key existed."""
        cache = InMemoryCache(name="test")
        cache.set("k", 1)
        assert cache.invalidate("k") is True
        assert cache.invalidate("k") is False

    def test_default_policy_never_evicts(self):
        """Without a policy every entry is kept."""
        cache = InMemoryCache(name="test")
        for index in range(500):
            cache.set(f"k{index}", index)
        assert cache.size() == 500

    def test_fifo_eviction_drops_oldest(self):
        """FIFO keeps the newest max_size keys."""
        cache = InMemoryCache(name="test", eviction=FifoEviction(max_size=2))
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.keys() == ["b", "c"]

    def test_overwrite_does_not_evict(self):
        """Updating an existing key keeps the others."""
        cache = InMemoryCache(name="test", eviction=FifoEviction(max_size=2))
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert cache.keys() == ["a", "b"]
        assert cache.get("a") == 10


class TestEvictionPolicies:
    """Test suite for the eviction policies."""

    def test_never_evict(self):
        assert NeverEvict().select_victims(["a", "b"], "c") == ()

    @pytest.mark.parametrize(
        "keys,expected",
        [
            ([], ()),
            (["a", "b"], ()),
            (["a", "b", "c"], ("a",)),
            (["a", "b", "c", "d"], ("a", "b")),
        ],
    )
    def test_fifo_victims(self, keys, expected):
        assert FifoEviction(max_size=3).select_victims(keys, "z") == expected

    def test_fifo_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            FifoEviction(max_size=0)


def test_null_cache_always_computes():
    """NullCache never stores anything."""
    cache = NullCache()
    compute = MagicMock(return_value="x")
    cache.get_or_compute("k", compute)
    cache.get_or_compute("k", compute)
    assert compute.call_count == 2
    assert cache.size() == 0
    assert cache.stats()["misses"] == 2
    assert cache.stats()["hits"] == 0
