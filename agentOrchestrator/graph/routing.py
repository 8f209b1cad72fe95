"""Routing logic for the agent step loop.

- agent → tools when the model requested tool calls, otherwise end
- tools → end when a terminal (signal) tool ran or the step budget is spent
- tools → agent otherwise (forced feedback loop)
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Literal, Optional

from langchain_core.messages import AIMessage, BaseMessage

from .state import AgentLoopState

LOGGER = logging.getLogger(__name__)


def last_ai_message(messages: List[BaseMessage]) -> Optional[AIMessage]:
    for message in reversed(messages):
        if isinstance(message, AIMessage):
            return message
    return None


def agent_route(state: AgentLoopState) -> Literal["tools", "end"]:
    """Route after the agent node."""
    messages = state.get("messages", [])
    if messages:
        last_message = messages[-1]
        if isinstance(last_message, AIMessage) and last_message.tool_calls:
            names = [tc["name"] for tc in last_message.tool_calls]
            LOGGER.debug(f"agent → tools ({', '.join(names)})")
            return "tools"

    LOGGER.debug("agent → end (no tool calls)")
    return "end"


def build_tools_route(terminal_tools: Iterable[str] = ()) -> Callable[[AgentLoopState], str]:
    """Route after the tools node, ending on terminal tools or an exhausted budget."""
    terminal = frozenset(terminal_tools)

    def tools_route(state: AgentLoopState) -> Literal["agent", "end"]:
        messages = state.get("messages", [])
        ai_message = last_ai_message(messages)
        if ai_message and terminal:
            called = {tc["name"] for tc in ai_message.tool_calls}
            if called & terminal:
                LOGGER.debug(f"tools → end (terminal tool: {', '.join(sorted(called & terminal))})")
                return "end"

        steps = state.get("steps", 0)
        max_steps = state.get("max_steps", 1)
        if steps >= max_steps:
            LOGGER.info(f"tools → end (step limit reached {steps}/{max_steps})")
            return "end"

        return "agent"

    return tools_route


__all__ = ["agent_route", "build_tools_route", "last_ai_message"]
