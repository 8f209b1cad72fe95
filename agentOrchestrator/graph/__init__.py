"""Agent step loop: LangGraph wiring, routing, prompts and event stream."""

from .builder import build_agent_graph, build_agent_node
from .routing import agent_route, build_tools_route
from .state import AgentLoopState
from .stream import Finish, StreamEvent, TextDelta, ToolCallEvent, ToolResultEvent, stream_agent_events

__all__ = [
    "AgentLoopState",
    "Finish",
    "StreamEvent",
    "TextDelta",
    "ToolCallEvent",
    "ToolResultEvent",
    "agent_route",
    "build_agent_graph",
    "build_agent_node",
    "build_tools_route",
    "stream_agent_events",
]
