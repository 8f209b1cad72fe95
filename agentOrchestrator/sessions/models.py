"""Session and Task records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Status of an orchestration session."""
    PLANNING = "planning"
    EXPLORING = "exploring"
    EXECUTING = "executing"
    WAITING_USER = "waiting_user"
    COMPLETE = "complete"
    ERROR = "error"


class TaskStatus(str, Enum):
    """Lifecycle of a task. DONE and CANCELLED are terminal."""
    STAGED = "staged"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.CANCELLED)


class TaskType(str, Enum):
    """Category of a task."""
    PLAN = "plan"
    EXPLORE = "explore"
    EXECUTE = "execute"


PENDING_STATUSES = (TaskStatus.STAGED, TaskStatus.IN_PROGRESS)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Task:
    """A trackable unit of work.

    Records are immutable: every status change stores a new Task under the
    same id, so concurrent workers never observe a half-written record.
    """
    id: str
    session_id: str
    title: str
    description: str
    type: TaskType
    status: TaskStatus = TaskStatus.STAGED
    result: Any = None
    created_at: datetime = field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "status": self.status.value,
            "result": self.result,
            "createdAt": _iso(self.created_at),
            "startedAt": _iso(self.started_at),
            "completedAt": _iso(self.completed_at),
        }


@dataclass
class Session:
    """One orchestration run bound to a conversation thread."""
    id: str
    thread_id: str
    status: SessionStatus = SessionStatus.PLANNING
    error: Optional[str] = None
    tasks: Dict[str, Task] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    last_activity_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.last_activity_at = utcnow()

    def status_payload(self) -> Dict[str, Any]:
        payload = {"id": self.id, "status": self.status.value}
        if self.error:
            payload["error"] = self.error
        return payload

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "threadId": self.thread_id,
            "status": self.status.value,
            "error": self.error,
            "createdAt": _iso(self.created_at),
            "lastActivityAt": _iso(self.last_activity_at),
        }


__all__ = [
    "PENDING_STATUSES",
    "Session",
    "SessionStatus",
    "Task",
    "TaskStatus",
    "TaskType",
    "utcnow",
]
