"""Cache port - Injectable caching abstraction.

The cache is process-scoped: the container creates it at startup and
hands it to the adapters that need it (geocoding). The eviction
behaviour is pluggable through EvictionPolicy.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Caching switched off
    """

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    def set(self, key: str, value: T) -> None:
        """Set a value in the cache.

        Args:
            key: The cache key.
            value: The value to cache.
        """
        ...

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Get from cache or compute and cache the value.

        Args:
            key: The cache key.
            compute_fn: Function to compute the value if not cached.

        Returns:
            The cached or computed value.
        """
        ...

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        ...

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry.

        Args:
            key: The cache key to invalidate.

        Returns:
            True if the key existed and was removed, False otherwise.
        """
        ...

    def size(self) -> int:
        """Return the number of entries in the cache."""
        ...


class EvictionPolicy(Protocol):
    """Decides which keys to drop before a new key is inserted.

    Implementations live in adapters/cache/eviction.py.
    """

    def select_victims(self, keys: Sequence[str], incoming: str) -> Sequence[str]:
        """Choose keys to evict.

        Args:
            keys: Current keys in insertion order.
            incoming: The key about to be inserted (not yet present).

        Returns:
            Keys to remove before inserting.
        """
        ...
