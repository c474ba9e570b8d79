"""Session store port - Keyed session persistence.

Handlers receive a mutable session and must save it back explicitly.
Mutations of one session are serialised through ``lock``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ContextManager, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Session


class SessionStorePort(Protocol):
    """Port for session storage.

    Implementation: adapters/sessions/memory_store.py
    """

    def new_session_id(self) -> str:
        """Generate a fresh, unused session identifier."""
        ...

    def get(self, session_id: str) -> Optional[Session]:
        """Load a session.

        Args:
            session_id: Session identifier.

        Returns:
            The session, or None if unknown.
        """
        ...

    def save(self, session: Session) -> None:
        """Persist a session under its identifier.

        Args:
            session: The session to store.
        """
        ...

    def exists(self, session_id: str) -> bool:
        """Check if a session exists."""
        ...

    def lock(self, session_id: str) -> ContextManager[None]:
        """Acquire exclusive access to one session.

        Args:
            session_id: Session identifier.

        Returns:
            A context manager held for the duration of the mutation.
        """
        ...
