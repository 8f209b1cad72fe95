"""Storage for sessions, indexed by id and by thread."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from .models import Session


class SessionRepository(Protocol):
    """Where sessions live. One active session per thread."""

    def get(self, session_id: str) -> Optional[Session]:
        ...

    def get_by_thread(self, thread_id: str) -> Optional[Session]:
        ...

    def put(self, session: Session) -> None:
        ...

    def delete(self, session_id: str) -> None:
        ...

    def list_sessions(self) -> List[Session]:
        ...


class InMemorySessionRepository:
    """Process-local repository backed by two dicts."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._by_thread: Dict[str, str] = {}  # thread_id -> session_id

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_by_thread(self, thread_id: str) -> Optional[Session]:
        session_id = self._by_thread.get(thread_id)
        return self._sessions.get(session_id) if session_id else None

    def put(self, session: Session) -> None:
        self._sessions[session.id] = session
        self._by_thread[session.thread_id] = session.id

    def delete(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session and self._by_thread.get(session.thread_id) == session_id:
            del self._by_thread[session.thread_id]

    def list_sessions(self) -> List[Session]:
        return list(self._sessions.values())


__all__ = ["SessionRepository", "InMemorySessionRepository"]
