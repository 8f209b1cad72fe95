"""Session & Task lifecycle management.

Owns every Session and Task, applies status transitions and pushes one
notification per mutation through the injected publisher.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from agentOrchestrator.events import EventType, OrchestrationEvent, Publisher, NullPublisher
from agentOrchestrator.utils.error_handler import SessionNotFoundError

from .models import (
    PENDING_STATUSES,
    Session,
    SessionStatus,
    Task,
    TaskStatus,
    TaskType,
    utcnow,
)
from .repository import InMemorySessionRepository, SessionRepository

LOGGER = logging.getLogger(__name__)

# view_tasks filter -> statuses it selects
TASK_FILTERS: Dict[str, tuple] = {
    "pending": (TaskStatus.STAGED,),
    "in_progress": (TaskStatus.IN_PROGRESS,),
    "done": (TaskStatus.DONE, TaskStatus.CANCELLED),
}

_STATUS_EVENTS = {
    SessionStatus.COMPLETE: EventType.SESSION_COMPLETE,
    SessionStatus.ERROR: EventType.SESSION_ERROR,
}


class SessionStore:
    """Creates sessions, tracks their tasks and broadcasts every change."""

    def __init__(
        self,
        repository: Optional[SessionRepository] = None,
        publisher: Optional[Publisher] = None,
    ) -> None:
        self.repository = repository if repository is not None else InMemorySessionRepository()
        self.publisher = publisher if publisher is not None else NullPublisher()

    # ========== Lookup ==========

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.repository.get(session_id)

    def get_session_by_thread(self, thread_id: str) -> Optional[Session]:
        return self.repository.get_by_thread(thread_id)

    def get_session_tasks(self, session_id: str) -> List[Task]:
        session = self.repository.get(session_id)
        return list(session.tasks.values()) if session else []

    def list_tasks(self, session_id: str, status_filter: Optional[str] = None) -> List[Task]:
        """Tasks of a session, optionally narrowed by a view filter.

        Filters: "all" (or None), "pending", "in_progress", "done" (done + cancelled).
        """
        tasks = self.get_session_tasks(session_id)
        if status_filter and status_filter != "all":
            statuses = TASK_FILTERS.get(status_filter)
            if statuses is None:
                raise ValueError(f"Unknown task filter: {status_filter}")
            tasks = [t for t in tasks if t.status in statuses]
        return tasks

    @staticmethod
    def pending_execute_tasks(session: Session) -> List[Task]:
        return [
            t for t in session.tasks.values()
            if t.type == TaskType.EXECUTE and t.status in PENDING_STATUSES
        ]

    # ========== Session lifecycle ==========

    def create_session(self, thread_id: str) -> Session:
        """Start a fresh session for a thread, discarding any previous one."""
        existing = self.repository.get_by_thread(thread_id)
        if existing:
            LOGGER.info(f"[SessionStore] Replacing session {existing.id} for thread {thread_id}")
            self.repository.delete(existing.id)

        session = Session(id=str(uuid.uuid4()), thread_id=thread_id)
        self.repository.put(session)

        self._emit(session, EventType.SESSION_CREATED, session=session.status_payload())
        LOGGER.info(f"[SessionStore] Created session {session.id} for thread {thread_id}")
        return session

    def update_status(
        self,
        session_id: str,
        status: Union[SessionStatus, str],
        error: Optional[str] = None,
    ) -> None:
        session = self.repository.get(session_id)
        if not session:
            LOGGER.debug(f"[SessionStore] update_status ignored, no session {session_id}")
            return

        status = SessionStatus(status)
        session.status = status
        session.touch()
        if error:
            session.error = error

        event_type = _STATUS_EVENTS.get(status, EventType.SESSION_UPDATED)
        payload = {"id": session.id, "status": status.value}
        if error:
            payload["error"] = error
        self._emit(session, event_type, session=payload)

    # ========== Task lifecycle ==========

    def add_task(
        self,
        session_id: str,
        title: str,
        description: str,
        task_type: Union[TaskType, str],
    ) -> Task:
        session = self.repository.get(session_id)
        if not session:
            raise SessionNotFoundError(session_id)

        task = Task(
            id=str(uuid.uuid4()),
            session_id=session_id,
            title=title,
            description=description,
            type=TaskType(task_type),
        )
        session.tasks[task.id] = task
        session.touch()

        self._emit(session, EventType.TASK_CREATED, task=task.to_dict())
        return task

    def update_task_status(
        self,
        session_id: str,
        task_id: str,
        status: Union[TaskStatus, str],
        result: Any = None,
    ) -> Optional[Task]:
        """Move a task to a new status.

        Missing sessions or tasks are ignored (cleanup may race with a late
        worker), as is any move out of a terminal status.
        """
        session = self.repository.get(session_id)
        if not session:
            return None
        task = session.tasks.get(task_id)
        if not task:
            return None

        status = TaskStatus(status)
        if task.status.is_terminal:
            LOGGER.debug(
                f"[SessionStore] Ignoring {task.status.value} -> {status.value} for terminal task {task_id}"
            )
            return task

        changes: Dict[str, Any] = {"status": status}
        if result is not None:
            changes["result"] = result
        if status == TaskStatus.IN_PROGRESS and task.started_at is None:
            changes["started_at"] = utcnow()
        if status.is_terminal:
            changes["completed_at"] = utcnow()

        updated = replace(task, **changes)
        session.tasks[task_id] = updated
        session.touch()

        self._emit(session, EventType.TASK_UPDATED, task=updated.to_dict())
        return updated

    def cleanup_incomplete_tasks(self, session: Session, reason: str, include_staged: bool = False) -> List[Task]:
        """Force-cancel unfinished tasks after a stage ends abnormally.

        Cancels every in_progress task; staged tasks too when include_staged.
        """
        targets = (TaskStatus.IN_PROGRESS, TaskStatus.STAGED) if include_staged else (TaskStatus.IN_PROGRESS,)
        cancelled = []
        for task in list(session.tasks.values()):
            if task.status not in targets:
                continue
            updated = replace(
                task,
                status=TaskStatus.CANCELLED,
                completed_at=utcnow(),
                result=reason,
            )
            session.tasks[task.id] = updated
            cancelled.append(updated)
            self._emit(session, EventType.TASK_UPDATED, task=updated.to_dict())

        if cancelled:
            session.touch()
            LOGGER.info(f"[SessionStore] Cancelled {len(cancelled)} task(s) in session {session.id}: {reason}")
        return cancelled

    def clear_completed_tasks(self, session_id: str) -> int:
        session = self.repository.get(session_id)
        if not session:
            return 0
        finished = [tid for tid, t in session.tasks.items() if t.status.is_terminal]
        for task_id in finished:
            del session.tasks[task_id]
        return len(finished)

    # ========== Reporting ==========

    @staticmethod
    def get_tasks_summary(session: Session) -> List[Dict[str, str]]:
        return [
            {"title": t.title, "type": t.type.value, "status": t.status.value}
            for t in session.tasks.values()
        ]

    def snapshot(self, thread_id: str) -> Optional[Dict[str, Any]]:
        """Current session + task state for clients joining mid-run."""
        session = self.repository.get_by_thread(thread_id)
        if not session:
            return None
        return {
            "session": session.to_dict(),
            "tasks": [t.to_dict() for t in session.tasks.values()],
        }

    def replay_events(self, thread_id: str) -> List[OrchestrationEvent]:
        """Events that bring a late subscriber up to date."""
        session = self.repository.get_by_thread(thread_id)
        if not session:
            return []
        events = [OrchestrationEvent(
            type=EventType.SESSION_UPDATED,
            session_id=session.id,
            thread_id=thread_id,
            payload={"session": session.status_payload()},
        )]
        for task in session.tasks.values():
            events.append(OrchestrationEvent(
                type=EventType.TASK_UPDATED,
                session_id=session.id,
                thread_id=thread_id,
                payload={"task": task.to_dict()},
            ))
        return events

    def _emit(self, target: Session, event_type: EventType, **payload: Any) -> None:
        self.publisher.publish(
            target.thread_id,
            OrchestrationEvent(
                type=event_type,
                session_id=target.id,
                thread_id=target.thread_id,
                payload=payload,
            ),
        )


__all__ = ["SessionStore", "TASK_FILTERS"]
