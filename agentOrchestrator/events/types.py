"""Notification event types pushed to clients of a thread."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class EventType(str, Enum):
    """Every notification the engine emits."""

    # Session lifecycle
    SESSION_CREATED = "session_created"
    SESSION_UPDATED = "session_updated"
    SESSION_COMPLETE = "session_complete"
    SESSION_ERROR = "session_error"

    # Task lifecycle
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"

    # Exploration fan-out
    EXPLORE_STARTED = "explore_started"
    SUB_AGENT_STARTED = "sub_agent_started"
    SUB_AGENT_DONE = "sub_agent_done"
    EXPLORE_COMPLETE = "explore_complete"

    # Execution fan-out
    EXECUTE_STARTED = "execute_started"
    SUB_EXECUTOR_STARTED = "sub_executor_started"
    SUB_EXECUTOR_DONE = "sub_executor_done"
    EXECUTE_COMPLETE = "execute_complete"

    # Informational passthrough
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"


@dataclass(frozen=True)
class OrchestrationEvent:
    """One notification, keyed by thread id for delivery."""

    type: EventType
    session_id: str
    thread_id: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "sessionId": self.session_id,
            "threadId": self.thread_id,
            **self.payload,
        }


__all__ = ["EventType", "OrchestrationEvent"]
