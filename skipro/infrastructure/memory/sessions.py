"""
In-memory session repository.

Sessions live for the lifetime of the process and are never written
anywhere else. The repository keeps the same surface a database-backed
one would (save/get/delete) so routes don't care where sessions live.
"""

import logging
from typing import Optional
from uuid import UUID

from ...core.coaching.models import CoachingSession


logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a session doesn't exist."""
    pass


class InMemorySessionRepository:
    """
    Dict-backed session storage.

    Sessions are stored by reference: mutating a session returned by
    get_session mutates the stored one. save_session is still called
    after each change so a persistent backend could slot in.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be positive")
        self._sessions: dict[UUID, CoachingSession] = {}
        self._max_sessions = max_sessions

    def create_session(self) -> CoachingSession:
        session = CoachingSession()
        self.save_session(session)
        return session

    def save_session(self, session: CoachingSession) -> None:
        if session.id not in self._sessions and len(self._sessions) >= self._max_sessions:
            self._evict_oldest()
        self._sessions[session.id] = session

    def get_session(self, session_id: UUID) -> CoachingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def find_session(self, session_id: UUID) -> Optional[CoachingSession]:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: UUID) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Session {session_id} not found")

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_oldest(self) -> None:
        oldest = min(self._sessions.values(), key=lambda s: s.updated_at)
        del self._sessions[oldest.id]
        logger.info("Evicted idle session", extra={"session_id": str(oldest.id)})
