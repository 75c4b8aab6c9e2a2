"""
In-process storage for coaching sessions.
"""

from .sessions import InMemorySessionRepository, SessionNotFoundError

__all__ = ["InMemorySessionRepository", "SessionNotFoundError"]
