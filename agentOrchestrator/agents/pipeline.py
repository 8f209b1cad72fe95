"""Two-stage orchestration pipeline: Plan, then (optionally) Execute.

    planning ──plan ok, execute tasks pending──▶ executing ──all done──▶ complete
        │                                           │
        │ plan ok, nothing to execute ──▶ complete  ├─ tasks left ──▶ (cancelled, success=False)
        │                                           │
        └──── model/tool failure ──▶ error ◀────────┘

A thrown failure in either stage is caught here: unfinished tasks are
cancelled, the session goes to error and only the message text is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langchain_core.language_models import BaseChatModel

from agentOrchestrator.events import NullPublisher, Publisher
from agentOrchestrator.graph.prompts import (
    EXECUTE_KICKOFF,
    PLAN_KICKOFF,
    build_execute_prompt,
    build_plan_prompt,
)
from agentOrchestrator.sessions.models import Session, SessionStatus, TaskStatus
from agentOrchestrator.sessions.store import SessionStore
from agentOrchestrator.tools.ask_user import build_ask_user_tool
from agentOrchestrator.tools.context import AgentToolContext, UserInputProvider
from agentOrchestrator.tools.fanout_tools import build_execute_tool, build_explore_tool
from agentOrchestrator.tools.registry import ToolRegistry
from agentOrchestrator.tools.task_tools import build_task_tools
from agentOrchestrator.utils.error_handler import format_error_message
from agentOrchestrator.utils.logging_utils import log_error, log_stage_transition

from .dispatcher import SubAgentDispatcher
from .runner import AgentRunner, EventScope

LOGGER = logging.getLogger(__name__)

INCOMPLETE_EXECUTION_REASON = "execution incomplete"


@dataclass
class StageResult:
    success: bool
    summary: str
    error: Optional[str] = None


@dataclass
class OrchestrationResult:
    success: bool
    summary: str
    tasks_summary: List[Dict[str, str]] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "summary": self.summary,
            "tasksSummary": list(self.tasks_summary),
        }
        if self.error:
            payload["error"] = self.error
        return payload


class OrchestrationPipeline:
    """Drives one session through the Plan and Execute stages."""

    def __init__(
        self,
        store: SessionStore,
        runner: AgentRunner,
        dispatcher: SubAgentDispatcher,
        tool_registry: Optional[ToolRegistry] = None,
        publisher: Optional[Publisher] = None,
        settings=None,
        user_input: Optional[UserInputProvider] = None,
    ) -> None:
        self.store = store
        self.runner = runner
        self.dispatcher = dispatcher
        self.tool_registry = tool_registry or ToolRegistry()
        self.publisher = publisher or NullPublisher()
        self.settings = settings if settings is not None else runner.settings
        self.user_input = user_input

    async def run(self, session: Session, task_description: str, model: BaseChatModel) -> OrchestrationResult:
        ctx = AgentToolContext(
            store=self.store,
            session_id=session.id,
            thread_id=session.thread_id,
            publisher=self.publisher,
            dispatcher=self.dispatcher,
            model=model,
            user_input=self.user_input,
        )

        plan = await self.run_plan_stage(ctx, session, task_description)
        if not plan.success:
            return self._result(session, plan)

        if self.store.pending_execute_tasks(session):
            return self._result(session, await self.run_execute_stage(ctx, session))

        self.store.update_status(session.id, SessionStatus.COMPLETE)
        log_stage_transition(LOGGER, session.id, "plan", "complete", tasks=len(session.tasks))
        return self._result(session, plan)

    # ========== Plan stage ==========

    async def run_plan_stage(self, ctx: AgentToolContext, session: Session, task_description: str) -> StageResult:
        task_tools = {t.name: t for t in build_task_tools(ctx)}
        tools = (
            [task_tools["add_task"], task_tools["set_task"], task_tools["view_tasks"], task_tools["clear_tasks"]]
            + [build_explore_tool(ctx), build_ask_user_tool(ctx)]
            + self.tool_registry.list_read_only_tools()
        )
        log_stage_transition(LOGGER, session.id, "start", "plan", tools=len(tools))
        try:
            output = await self.runner.run(
                model=ctx.model,
                tools=tools,
                system_prompt=build_plan_prompt(task_description),
                user_message=PLAN_KICKOFF,
                max_steps=self.settings.orchestration.plan_max_steps,
                label="PlanAgent",
                scope=EventScope(session_id=session.id, thread_id=session.thread_id),
            )
        except Exception as e:
            return self._fail(session, e, stage="plan", reason_prefix="Planning error: ", summary="Planning failed")

        pending = self.store.pending_execute_tasks(session)
        if pending:
            self.store.update_status(session.id, SessionStatus.EXECUTING)
            log_stage_transition(LOGGER, session.id, "plan", "execute", pending=len(pending))

        summary = output.text or f"Planning complete. Created {len(session.tasks)} tasks."
        return StageResult(success=True, summary=summary)

    # ========== Execute stage ==========

    async def run_execute_stage(self, ctx: AgentToolContext, session: Session) -> StageResult:
        task_tools = {t.name: t for t in build_task_tools(ctx)}
        tools = (
            [task_tools["view_tasks"], task_tools["set_task"], build_execute_tool(ctx), build_ask_user_tool(ctx)]
            + self.tool_registry.list_tools()
        )
        pending = self.store.pending_execute_tasks(session)
        try:
            output = await self.runner.run(
                model=ctx.model,
                tools=tools,
                system_prompt=build_execute_prompt(pending),
                user_message=EXECUTE_KICKOFF,
                max_steps=self.settings.orchestration.execute_max_steps,
                label="ExecutorAgent",
                scope=EventScope(session_id=session.id, thread_id=session.thread_id),
            )
        except Exception as e:
            return self._fail(session, e, stage="execute", reason_prefix="Error: ", summary="Execution failed")

        remaining = self.store.pending_execute_tasks(session)
        completed = [t for t in session.tasks.values() if t.status == TaskStatus.DONE]
        summary = output.text or f"Execution complete. Completed {len(completed)} tasks."

        if remaining:
            self.store.cleanup_incomplete_tasks(session, INCOMPLETE_EXECUTION_REASON, include_staged=True)
            LOGGER.warning(f"[Pipeline] {len(remaining)} task(s) left unfinished in session {session.id}, cancelled")
            return StageResult(success=False, summary=summary)

        self.store.update_status(session.id, SessionStatus.COMPLETE)
        log_stage_transition(LOGGER, session.id, "execute", "complete", completed=len(completed))
        return StageResult(success=True, summary=summary)

    # ========== Helpers ==========

    def _fail(self, session: Session, error: Exception, *, stage: str, reason_prefix: str, summary: str) -> StageResult:
        log_error(LOGGER, error, context=f"{stage} stage of session {session.id}")
        message = format_error_message(error)
        self.store.cleanup_incomplete_tasks(session, f"{reason_prefix}{message}")
        self.store.update_status(session.id, SessionStatus.ERROR, error=message)
        log_stage_transition(LOGGER, session.id, stage, "error", error=message)
        return StageResult(success=False, summary=summary, error=message)

    def _result(self, session: Session, stage: StageResult) -> OrchestrationResult:
        return OrchestrationResult(
            success=stage.success,
            summary=stage.summary,
            tasks_summary=self.store.get_tasks_summary(session),
            error=stage.error,
        )


__all__ = [
    "INCOMPLETE_EXECUTION_REASON",
    "OrchestrationPipeline",
    "OrchestrationResult",
    "StageResult",
]
