"""State carried through one agent step loop.

Every agent run (plan stage, execute stage, each worker) gets its own
independent state; runs never share message history.
"""

from __future__ import annotations

from typing import Annotated, List, TypedDict

from langchain_core.messages import BaseMessage
from langgraph.graph import add_messages


class AgentLoopState(TypedDict, total=False):
    """State for a single model-driven step loop."""

    messages: Annotated[List[BaseMessage], add_messages]
    """Running transcript (HumanMessage, AIMessage, ToolMessage). No SystemMessage."""

    steps: int
    """Model calls made so far (incremented by the agent node)."""

    max_steps: int
    """Step budget; the loop ends once it is spent."""


__all__ = ["AgentLoopState"]
