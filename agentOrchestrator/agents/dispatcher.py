"""Sub-agent dispatcher: concurrent exploration and execution workers.

Both fan-outs share one template:

    emit batch start → emit worker start (request order)
    → run all workers concurrently, each failure becomes a failed outcome
    → emit worker done (completion order) → emit batch complete

The issuing stage is blocked until every worker has settled; a failing
worker never cancels its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from agentOrchestrator.events import EventType, NullPublisher, OrchestrationEvent, Publisher
from agentOrchestrator.graph.prompts import (
    EXPLORE_KICKOFF,
    SUB_EXECUTOR_KICKOFF,
    build_explore_prompt,
    build_sub_executor_prompt,
)
from agentOrchestrator.sessions.models import SessionStatus
from agentOrchestrator.tools.registry import ToolRegistry
from agentOrchestrator.tools.signal_tools import (
    REPORT_COMPLETION,
    SUBMIT_FINDINGS,
    report_completion,
    submit_findings,
)
from agentOrchestrator.tools.task_tools import build_task_tools
from agentOrchestrator.utils.error_handler import format_error_message
from agentOrchestrator.utils.logging_utils import log_error

from .runner import AgentRunner

LOGGER = logging.getLogger(__name__)


@dataclass
class WorkerOutcome:
    """Result of one execution worker."""

    success: bool
    summary: str
    errors: Optional[List[str]] = None
    task_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "taskIds": list(self.task_ids),
            "success": self.success,
            "summary": self.summary,
        }
        if self.errors:
            payload["errors"] = list(self.errors)
        return payload


@dataclass(frozen=True)
class ExecutionAssignment:
    task_ids: List[str]
    context: str = ""

    @classmethod
    def coerce(cls, value: Union["ExecutionAssignment", Mapping[str, Any]]) -> "ExecutionAssignment":
        if isinstance(value, cls):
            return value
        task_ids = value.get("task_ids", value.get("tasks")) or []
        return cls(task_ids=list(task_ids), context=value.get("context") or "")


class SubAgentDispatcher:
    """Spawns worker runs for the explore and execute capabilities."""

    def __init__(
        self,
        runner: AgentRunner,
        tool_registry: Optional[ToolRegistry] = None,
        store=None,
        publisher: Optional[Publisher] = None,
        settings=None,
    ) -> None:
        self.runner = runner
        self.tool_registry = tool_registry or ToolRegistry()
        self.store = store
        self.publisher = publisher or NullPublisher()
        self.settings = settings if settings is not None else runner.settings

        # session id -> [active exploration batches, status before the first one]
        self._exploring: Dict[str, list] = {}

        limit = self.settings.orchestration.max_concurrent_workers
        self._semaphore = asyncio.Semaphore(limit) if limit else None

    # ========== Exploration ==========

    async def explore(self, ctx, prompts: Sequence[str]) -> List[str]:
        """Run one read-only research worker per prompt; summaries in prompt order."""
        prompts = list(prompts)
        session = ctx.session()
        if session:
            self._enter_exploring(session)

        async def work(index: int, prompt: str) -> str:
            return await self._run_explorer(ctx, index, prompt)

        def on_failure(index: int, prompt: str, error: BaseException) -> str:
            return f"Error exploring: {format_error_message(error)}"

        def done_payload(index: int, prompt: str, result: str, error: Optional[BaseException]) -> Dict[str, Any]:
            summary = f"Error: {format_error_message(error)}" if error else result
            return {"index": index, "summary": summary}

        try:
            return await self._fan_out(
                ctx,
                requests=prompts,
                batch_started=(EventType.EXPLORE_STARTED, {"count": len(prompts), "prompts": prompts}),
                worker_started=(EventType.SUB_AGENT_STARTED, lambda i, p: {"index": i, "prompt": p}),
                worker_done=(EventType.SUB_AGENT_DONE, done_payload),
                batch_complete=(EventType.EXPLORE_COMPLETE, lambda results: {"results": results}),
                work=work,
                on_failure=on_failure,
            )
        finally:
            if session:
                self._leave_exploring(session)

    def _enter_exploring(self, session) -> None:
        entry = self._exploring.get(session.id)
        if entry is None:
            self._exploring[session.id] = [1, session.status]
            self.store.update_status(session.id, SessionStatus.EXPLORING)
        else:
            entry[0] += 1

    def _leave_exploring(self, session) -> None:
        entry = self._exploring[session.id]
        entry[0] -= 1
        if entry[0] == 0:
            del self._exploring[session.id]
            self.store.update_status(session.id, entry[1])

    async def _run_explorer(self, ctx, index: int, prompt: str) -> str:
        tools = list(self.tool_registry.list_read_only_tools()) + [submit_findings]
        output = await self.runner.run(
            model=ctx.model,
            tools=tools,
            system_prompt=build_explore_prompt(prompt),
            user_message=EXPLORE_KICKOFF,
            max_steps=self.settings.orchestration.explore_max_steps,
            terminal_tools=(SUBMIT_FINDINGS,),
            label=f"explorer-{index}",
        )
        call = output.find_tool_call(SUBMIT_FINDINGS)
        if call and call.args.get("summary"):
            return call.args["summary"]
        return output.text

    # ========== Execution ==========

    async def execute(self, ctx, assignments: Sequence[Union[ExecutionAssignment, Mapping[str, Any]]]) -> List[WorkerOutcome]:
        """Run one execution worker per assignment; outcomes in assignment order."""
        assignments = [ExecutionAssignment.coerce(a) for a in assignments]
        if ctx.session_id:
            self.store.update_status(ctx.session_id, SessionStatus.EXECUTING)

        async def work(index: int, assignment: ExecutionAssignment) -> WorkerOutcome:
            return await self._run_executor(ctx, index, assignment)

        def on_failure(index: int, assignment: ExecutionAssignment, error: BaseException) -> WorkerOutcome:
            message = format_error_message(error)
            return WorkerOutcome(
                success=False,
                summary=f"Error: {message}",
                errors=[message],
                task_ids=list(assignment.task_ids),
            )

        def done_payload(index: int, assignment: ExecutionAssignment, outcome: WorkerOutcome, error) -> Dict[str, Any]:
            return {
                "index": index,
                "taskIds": list(assignment.task_ids),
                "summary": outcome.summary,
                "success": outcome.success,
            }

        return await self._fan_out(
            ctx,
            requests=assignments,
            batch_started=(EventType.EXECUTE_STARTED, {"count": len(assignments)}),
            worker_started=(EventType.SUB_EXECUTOR_STARTED, lambda i, a: {"index": i, "taskIds": list(a.task_ids)}),
            worker_done=(EventType.SUB_EXECUTOR_DONE, done_payload),
            batch_complete=(EventType.EXECUTE_COMPLETE, lambda results: {"results": [o.to_dict() for o in results]}),
            work=work,
            on_failure=on_failure,
        )

    async def _run_executor(self, ctx, index: int, assignment: ExecutionAssignment) -> WorkerOutcome:
        worker_ctx = ctx.for_worker()
        set_task = next(t for t in build_task_tools(worker_ctx) if t.name == "set_task")
        tools = list(self.tool_registry.list_tools()) + [set_task, report_completion]
        output = await self.runner.run(
            model=ctx.model,
            tools=tools,
            system_prompt=build_sub_executor_prompt(assignment.task_ids, assignment.context),
            user_message=SUB_EXECUTOR_KICKOFF,
            max_steps=self.settings.orchestration.sub_executor_max_steps,
            terminal_tools=(REPORT_COMPLETION,),
            label=f"executor-{index}",
        )
        call = output.find_tool_call(REPORT_COMPLETION)
        args = call.args if call else {}
        return WorkerOutcome(
            success=bool(args.get("success", False)),
            summary=args.get("summary") or output.text,
            errors=args.get("errors"),
            task_ids=list(assignment.task_ids),
        )

    # ========== Shared template ==========

    async def _fan_out(
        self,
        ctx,
        *,
        requests: List[Any],
        batch_started,
        worker_started,
        worker_done,
        batch_complete,
        work: Callable[[int, Any], Awaitable[Any]],
        on_failure: Callable[[int, Any, BaseException], Any],
    ) -> List[Any]:
        started_type, started_payload = batch_started
        self._emit(ctx, started_type, started_payload)

        worker_started_type, worker_started_payload = worker_started
        for index, request in enumerate(requests):
            self._emit(ctx, worker_started_type, worker_started_payload(index, request))

        worker_done_type, worker_done_payload = worker_done

        async def settle(index: int, request: Any) -> Any:
            error: Optional[BaseException] = None
            try:
                if self._semaphore is not None:
                    async with self._semaphore:
                        result = await work(index, request)
                else:
                    result = await work(index, request)
            except Exception as e:
                log_error(LOGGER, e, context=f"worker {index}")
                error = e
                result = on_failure(index, request, e)
            self._emit(ctx, worker_done_type, worker_done_payload(index, request, result, error))
            return result

        LOGGER.info(f"[Dispatcher] Fanning out {len(requests)} worker(s)")
        results = list(await asyncio.gather(*(settle(i, r) for i, r in enumerate(requests))))

        complete_type, complete_payload = batch_complete
        self._emit(ctx, complete_type, complete_payload(results))
        return results

    def _emit(self, ctx, event_type: EventType, payload: Dict[str, Any]) -> None:
        if not ctx.thread_id:
            return
        self.publisher.publish(
            ctx.thread_id,
            OrchestrationEvent(
                type=event_type,
                session_id=ctx.session_id or "",
                thread_id=ctx.thread_id,
                payload=payload,
            ),
        )


__all__ = ["ExecutionAssignment", "SubAgentDispatcher", "WorkerOutcome"]
