"""Eviction policies for InMemoryCache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class NeverEvict:
    """Keep every entry for the life of the process."""

    def select_victims(self, keys: Sequence[str], incoming: str) -> Sequence[str]:
        return ()


@dataclass(frozen=True)
class FifoEviction:
    """Drop the oldest entries once max_size is reached.

    Attributes:
        max_size: Maximum number of entries kept
    """

    max_size: int

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValueError(f"max_size must be positive, got {self.max_size}")

    def select_victims(self, keys: Sequence[str], incoming: str) -> Sequence[str]:
        overflow = len(keys) + 1 - self.max_size
        if overflow <= 0:
            return ()
        return tuple(keys[:overflow])
