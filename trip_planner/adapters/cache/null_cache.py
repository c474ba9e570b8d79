"""Pass-through geocode cache.

Bound by the container when PLANNER_GEO_CACHE_ENABLED is false, so every
city lookup reaches Nominatim. Lookups are still counted and reported
through the same stats() shape as InMemoryCache.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """Cache that stores nothing; every lookup is a miss."""

    name: str = "null"

    _misses: int = field(default=0, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _miss(self) -> None:
        with self._lock:
            self._misses += 1

    def get(self, key: str) -> Optional[T]:
        self._miss()
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        return None

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        self._miss()
        return compute_fn()

    def clear(self) -> int:
        return 0

    def invalidate(self, key: str) -> bool:
        return False

    def size(self) -> int:
        return 0

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {"size": 0, "hits": 0, "misses": self._misses, "hit_rate_percent": 0.0}
