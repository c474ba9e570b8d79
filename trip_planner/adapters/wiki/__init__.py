"""Travel guide adapters - Implementations of the WikiContentPort."""

from .wikivoyage_adapter import WikivoyageAdapter

__all__ = ["WikivoyageAdapter"]
