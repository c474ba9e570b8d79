"""Session store adapters - Implementations of the SessionStorePort."""

from .memory_store import InMemorySessionStore

__all__ = ["InMemorySessionStore"]
