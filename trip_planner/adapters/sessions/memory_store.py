"""In-memory session store with per-session locking.

Sessions live for the process lifetime. Two requests touching the same
session are serialised through that session's lock; requests on
different sessions do not contend.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ...domain.models import Session


@dataclass
class InMemorySessionStore:
    """SessionStorePort implementation backed by a dictionary."""

    _sessions: Dict[str, Session] = field(default_factory=dict, repr=False)
    _locks: Dict[str, threading.Lock] = field(default_factory=dict, repr=False)
    _guard: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def new_session_id(self) -> str:
        """Generate an identifier like 'session_1718000000000_1a2b3c4d'."""
        with self._guard:
            while True:
                candidate = f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
                if candidate not in self._sessions:
                    return candidate

    def get(self, session_id: str) -> Optional[Session]:
        with self._guard:
            return self._sessions.get(session_id)

    def save(self, session: Session) -> None:
        with self._guard:
            self._sessions[session.session_id] = session
        self._logger.debug("Session saved", extra={"session_id": session.session_id})

    def exists(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._sessions

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
            return lock

    @contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        """Hold exclusive access to one session."""
        session_lock = self._lock_for(session_id)
        with session_lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)
