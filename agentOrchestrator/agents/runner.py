"""Runs one model-driven step loop and collects its outcome.

Every run (plan stage, execute stage, each worker) compiles its own graph
with its own tools and starts from an empty transcript.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_core.tools import BaseTool

from agentOrchestrator.context import (
    ContextBudgeter,
    build_token_oracle,
    compute_target_tokens,
    get_max_context_tokens,
)
from agentOrchestrator.events import EventType, NullPublisher, OrchestrationEvent, Publisher
from agentOrchestrator.graph import (
    Finish,
    TextDelta,
    ToolCallEvent,
    ToolResultEvent,
    build_agent_graph,
    stream_agent_events,
)
from agentOrchestrator.utils.logging_utils import log_tool_call, log_tool_result

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventScope:
    """Where tool_call / tool_result notifications of a run are delivered."""

    session_id: str
    thread_id: str


@dataclass
class AgentRunOutput:
    text: str
    tool_calls: List[ToolCallEvent] = field(default_factory=list)
    steps: int = 0
    finish_reason: str = "stop"

    def find_tool_call(self, name: str) -> Optional[ToolCallEvent]:
        """Last call of the named tool, if the run made one."""
        for call in reversed(self.tool_calls):
            if call.name == name:
                return call
        return None


class AgentRunner:
    """Compiles and drives step-loop graphs with shared budgeting settings."""

    def __init__(
        self,
        settings,
        budgeter: Optional[ContextBudgeter] = None,
        publisher: Optional[Publisher] = None,
    ) -> None:
        self.settings = settings
        self.budgeter = budgeter or ContextBudgeter(settings)
        self.publisher = publisher or NullPublisher()

    def target_tokens(self, tools: Sequence[BaseTool]) -> int:
        models = self.settings.models
        context = self.settings.context
        max_tokens = get_max_context_tokens(
            models.provider,
            models.model_id,
            context_window=models.context_window,
            response_buffer=context.response_buffer_tokens,
        )
        return compute_target_tokens(max_tokens, tools, context.chars_per_token)

    async def run(
        self,
        *,
        model: BaseChatModel,
        tools: Sequence[BaseTool],
        system_prompt: str,
        user_message: str,
        max_steps: int,
        terminal_tools: Iterable[str] = (),
        label: str = "agent",
        scope: Optional[EventScope] = None,
    ) -> AgentRunOutput:
        """Run the loop to completion.

        Model errors propagate to the caller; tool errors are fed back to the
        model by the tools node.
        """
        terminal_tools = tuple(terminal_tools)
        context = self.settings.context
        app = build_agent_graph(
            model=model,
            tools=tools,
            system_prompt=system_prompt,
            budgeter=self.budgeter,
            target_tokens=self.target_tokens(tools),
            terminal_tools=terminal_tools,
            oracle=build_token_oracle(model, context.exact_token_counting),
            max_tool_result_chars=context.max_tool_result_chars,
            head_ratio=context.head_ratio,
            label=label,
        )

        initial_state = {
            "messages": [HumanMessage(content=user_message)],
            "steps": 0,
            "max_steps": max_steps,
        }
        config = {"recursion_limit": max_steps * 2 + 5}

        texts: List[str] = []
        tool_calls: List[ToolCallEvent] = []
        finish = Finish(reason="stop", steps=0)

        async for event in stream_agent_events(
            app,
            initial_state,
            max_steps=max_steps,
            terminal_tools=terminal_tools,
            config=config,
        ):
            if isinstance(event, TextDelta):
                texts.append(event.text)
            elif isinstance(event, ToolCallEvent):
                tool_calls.append(event)
                log_tool_call(LOGGER, label, event.name, event.args)
                self._publish(scope, EventType.TOOL_CALL, {
                    "id": event.id,
                    "toolName": event.name,
                    "status": "calling",
                    "args": event.args,
                })
            elif isinstance(event, ToolResultEvent):
                log_tool_result(
                    LOGGER, label, event.name, event.result,
                    max_length=self.settings.observability.log_prompt_max_length,
                )
                self._publish(scope, EventType.TOOL_RESULT, {
                    "id": event.id,
                    "toolName": event.name,
                    "status": "done",
                    "result": event.result,
                })
            elif isinstance(event, Finish):
                finish = event
            else:
                raise TypeError(f"Unexpected stream event: {event!r}")

        LOGGER.info(f"[{label}] Finished after {finish.steps} step(s): {finish.reason}")
        return AgentRunOutput(
            text="\n\n".join(texts),
            tool_calls=tool_calls,
            steps=finish.steps,
            finish_reason=finish.reason,
        )

    def _publish(self, scope: Optional[EventScope], event_type: EventType, tool_call: Dict[str, Any]) -> None:
        if scope is None:
            return
        self.publisher.publish(
            scope.thread_id,
            OrchestrationEvent(
                type=event_type,
                session_id=scope.session_id,
                thread_id=scope.thread_id,
                payload={"toolCall": tool_call},
            ),
        )


__all__ = ["AgentRunOutput", "AgentRunner", "EventScope"]
