"""Thread-safe in-memory cache implementation.

Used as the process-scoped geocode cache. Entries live until they
expire (optional TTL) or the eviction policy drops them; the default
policy never evicts.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from ...ports.cache import EvictionPolicy
from .eviction import NeverEvict

T = TypeVar("T")


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe in-memory cache with optional TTL.

    This cache implements the CachePort protocol and can be injected
    into adapters that need caching functionality.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        eviction: Policy choosing entries to drop on insert
        name: Cache name for logging

    Example:
        cache = InMemoryCache[City](name="geocode", eviction=FifoEviction(256))
        city = cache.get_or_compute("jaipur", lambda: lookup("Jaipur"))
    """

    default_ttl_seconds: Optional[float] = None
    eviction: EvictionPolicy = field(default_factory=NeverEvict)
    name: str = "cache"

    _store: Dict[str, Tuple[Any, float]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if time.time() > expiry:
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Set a value in the cache.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override for this entry.
        """
        with self._lock:
            if key not in self._store:
                victims = self.eviction.select_victims(list(self._store), key)
                for victim in victims:
                    self._store.pop(victim, None)
                    self._logger.debug(
                        "Cache evicted entry",
                        extra={"key": victim, "policy": type(self.eviction).__name__},
                    )

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            if effective_ttl is not None:
                expiry = time.time() + effective_ttl
            else:
                expiry = float("inf")

            self._store[key] = (value, expiry)
            self._logger.debug(
                "Cache entry set",
                extra={"key": key, "ttl": effective_ttl},
            )

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Get from cache or compute and cache the value.

        None results are returned but not cached.

        Args:
            key: The cache key.
            compute_fn: Function to compute the value if not cached.

        Returns:
            The cached or computed value.
        """
        value = self.get(key)
        if value is not None:
            self._logger.debug("Cache hit", extra={"key": key})
            return value

        # Computed outside the lock so slow lookups don't block readers
        self._logger.debug("Cache miss, computing", extra={"key": key})
        computed = compute_fn()
        if computed is not None:
            self.set(key, computed)
        return computed

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry.

        Args:
            key: The cache key to invalidate.

        Returns:
            True if the key existed and was removed.
        """
        with self._lock:
            if key in self._store:
                del self._store[key]
                self._logger.debug("Cache entry invalidated", extra={"key": key})
                return True
            return False

    def size(self) -> int:
        """Return the number of entries in the cache."""
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with hit/miss counts and size.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }

    def keys(self) -> list[str]:
        """Return all keys in insertion order."""
        with self._lock:
            return list(self._store.keys())
