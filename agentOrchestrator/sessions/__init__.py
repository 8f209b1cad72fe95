"""Session Store: sessions, tasks and their lifecycle."""

from .models import PENDING_STATUSES, Session, SessionStatus, Task, TaskStatus, TaskType
from .repository import InMemorySessionRepository, SessionRepository
from .store import TASK_FILTERS, SessionStore

__all__ = [
    "PENDING_STATUSES",
    "Session",
    "SessionStatus",
    "Task",
    "TaskStatus",
    "TaskType",
    "InMemorySessionRepository",
    "SessionRepository",
    "SessionStore",
    "TASK_FILTERS",
]
