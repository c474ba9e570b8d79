"""Cache adapters - Implementations of the CachePort.

Available implementations:
- InMemoryCache: Thread-safe in-memory cache with optional TTL
- NullCache: Pass-through cache used when geocode caching is off

Eviction policies:
- NeverEvict: Default, entries live for the process lifetime
- FifoEviction: Bounded size, oldest entries dropped first
"""

from .eviction import FifoEviction, NeverEvict
from .memory_cache import InMemoryCache
from .null_cache import NullCache

__all__ = ["InMemoryCache", "NullCache", "NeverEvict", "FifoEviction"]
