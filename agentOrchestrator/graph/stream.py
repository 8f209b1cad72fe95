"""Typed events produced while an agent step loop runs.

LangGraph "updates" chunks are converted into a closed set of event types:
TextDelta, ToolCallEvent, ToolResultEvent and a final Finish. Consumers
handle each type explicitly and reject anything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Iterable, List, Union

from langchain_core.messages import AIMessage, ToolMessage

from agentOrchestrator.context.budgeter import message_text


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class ToolCallEvent:
    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResultEvent:
    id: str
    name: str
    result: str


@dataclass(frozen=True)
class Finish:
    reason: str  # "stop" | "terminal_tool" | "step_limit"
    steps: int


StreamEvent = Union[TextDelta, ToolCallEvent, ToolResultEvent, Finish]


def events_from_update(node: str, update: Any) -> List[StreamEvent]:
    """Convert one node update into stream events."""
    if not isinstance(update, dict):
        return []

    events: List[StreamEvent] = []
    for message in update.get("messages", []) or []:
        if isinstance(message, AIMessage):
            text = message_text(message)
            if text:
                events.append(TextDelta(text=text))
            for tool_call in message.tool_calls:
                events.append(ToolCallEvent(
                    id=tool_call.get("id") or "",
                    name=tool_call["name"],
                    args=dict(tool_call.get("args") or {}),
                ))
        elif isinstance(message, ToolMessage):
            events.append(ToolResultEvent(
                id=message.tool_call_id,
                name=message.name or "tool",
                result=message_text(message),
            ))
    return events


async def stream_agent_events(
    app,
    initial_state: dict,
    *,
    max_steps: int,
    terminal_tools: Iterable[str] = (),
    config: dict = None,
) -> AsyncIterator[StreamEvent]:
    """Run a compiled step-loop graph, yielding typed events and a final Finish."""
    terminal = frozenset(terminal_tools)
    steps = 0
    last_step_called_tools = False
    terminal_called = False

    async for chunk in app.astream(initial_state, config=config, stream_mode="updates"):
        for node, update in chunk.items():
            if node == "agent":
                steps += 1
                last_step_called_tools = False
            for event in events_from_update(node, update):
                if isinstance(event, ToolCallEvent):
                    last_step_called_tools = True
                    if event.name in terminal:
                        terminal_called = True
                yield event

    if terminal_called:
        reason = "terminal_tool"
    elif last_step_called_tools and steps >= max_steps:
        reason = "step_limit"
    else:
        reason = "stop"
    yield Finish(reason=reason, steps=steps)


__all__ = [
    "Finish",
    "StreamEvent",
    "TextDelta",
    "ToolCallEvent",
    "ToolResultEvent",
    "events_from_update",
    "stream_agent_events",
]
