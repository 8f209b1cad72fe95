"""Task-list capabilities: add_task, set_task, view_tasks, clear_tasks."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Literal, Optional

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from agentOrchestrator.sessions.store import TASK_FILTERS

from .context import NO_SESSION_ERROR, AgentToolContext

LOGGER = logging.getLogger(__name__)


class AddTaskInput(BaseModel):
    title: str = Field(..., description="Short title for the task")
    description: str = Field(..., description="Detailed description of what needs to be done")
    type: Literal["plan", "explore", "execute"] = Field(
        default="execute",
        description="plan = planning step, explore = research, execute = work to carry out",
    )


class SetTaskInput(BaseModel):
    taskId: str = Field(..., description="The task ID to update")
    status: Literal["staged", "in_progress", "done", "cancelled"] = Field(..., description="New status")
    result: Optional[Any] = Field(default=None, description="Result data when marking done or the reason when cancelling")


class ViewTasksInput(BaseModel):
    filter: Optional[Literal["all", "pending", "in_progress", "done"]] = Field(
        default=None,
        description="Filter by status (done includes cancelled)",
    )


def _dumps(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, default=str)


def build_task_tools(ctx: AgentToolContext) -> List[BaseTool]:
    """Build the four task tools bound to one run's context."""

    @tool("add_task", args_schema=AddTaskInput)
    async def add_task(title: str, description: str, type: str = "execute") -> str:
        """Add a task to the current session's plan.

        Use "execute" for work that the executor should carry out later.
        Returns the new task id.
        """
        if ctx.session() is None:
            return _dumps({"error": NO_SESSION_ERROR})
        task = ctx.store.add_task(ctx.session_id, title, description, type)
        LOGGER.info(f"[add_task] {task.id} ({type}): {title}")
        return _dumps({"taskId": task.id, "status": "created"})

    @tool("set_task", args_schema=SetTaskInput)
    async def set_task(taskId: str, status: str, result: Any = None) -> str:
        """Update a task's status.

        Use 'in_progress' when starting work on a task, 'done' when it is
        complete and 'cancelled' if it cannot be completed.
        """
        if ctx.session() is None:
            return _dumps({"error": NO_SESSION_ERROR})
        ctx.store.update_task_status(ctx.session_id, taskId, status, result)
        return _dumps({"taskId": taskId, "status": status, "updated": True})

    @tool("view_tasks", args_schema=ViewTasksInput)
    async def view_tasks(filter: Optional[str] = None) -> str:
        """View the tasks of the current session, optionally filtered by status."""
        if ctx.session() is None:
            return _dumps({"error": NO_SESSION_ERROR, "tasks": []})
        if filter and filter != "all" and filter not in TASK_FILTERS:
            return _dumps({"error": f"Unknown filter: {filter}", "tasks": []})
        tasks = ctx.store.list_tasks(ctx.session_id, filter)
        return _dumps({
            "tasks": [
                {"id": t.id, "title": t.title, "type": t.type.value, "status": t.status.value}
                for t in tasks
            ]
        })

    @tool("clear_tasks")
    async def clear_tasks() -> str:
        """Remove finished (done or cancelled) tasks from the session."""
        if ctx.session() is None:
            return _dumps({"error": NO_SESSION_ERROR})
        removed = ctx.store.clear_completed_tasks(ctx.session_id)
        LOGGER.info(f"[clear_tasks] Removed {removed} finished task(s)")
        return _dumps({"cleared": True})

    return [add_task, set_task, view_tasks, clear_tasks]


__all__ = ["AddTaskInput", "SetTaskInput", "ViewTasksInput", "build_task_tools"]
