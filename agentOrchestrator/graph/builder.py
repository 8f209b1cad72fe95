"""Graph builder for one model-driven step loop.

    START → agent ⇄ tools → END

The agent node shapes the transcript (tool-result truncation, then context
budgeting) before every model call. The tools node is a plain ToolNode;
tool failures come back to the model as error ToolMessages.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage
from langchain_core.tools import BaseTool
from langgraph.graph import END, START, StateGraph
from langgraph.prebuilt import ToolNode

from agentOrchestrator.context import ContextBudgeter, TokenOracle, truncate_tool_results_in_messages
from agentOrchestrator.context.truncator import DEFAULT_HEAD_RATIO, DEFAULT_MAX_TOOL_RESULT_CHARS
from agentOrchestrator.utils.error_handler import ModelInvocationError

from .routing import agent_route, build_tools_route
from .state import AgentLoopState

LOGGER = logging.getLogger(__name__)


def build_agent_node(
    *,
    model: BaseChatModel,
    tools: Sequence[BaseTool],
    system_prompt: str,
    budgeter: ContextBudgeter,
    target_tokens: int,
    oracle: Optional[TokenOracle] = None,
    max_tool_result_chars: int = DEFAULT_MAX_TOOL_RESULT_CHARS,
    head_ratio: float = DEFAULT_HEAD_RATIO,
    label: str = "agent",
) -> Callable:
    """Build the agent node.

    Args:
        model: Chat model (must support bind_tools when tools are given)
        tools: Capabilities offered to the model
        system_prompt: Instruction text for this run
        budgeter: Context budgeter applied before each call
        target_tokens: Transcript budget (net of reply space and tool schemas)
        oracle: Exact token counter, if the model family has one
        max_tool_result_chars: Cap for a single tool result in the transcript
        head_ratio: Share of a truncated result kept from its start
        label: Name used in logs

    Returns:
        Async function that processes AgentLoopState
    """
    bound_model = model.bind_tools(list(tools)) if tools else model

    async def agent_node(state: AgentLoopState) -> dict:
        transcript = [m for m in state.get("messages", []) if not isinstance(m, SystemMessage)]
        transcript = truncate_tool_results_in_messages(transcript, max_tool_result_chars, head_ratio)
        transcript = budgeter.fit(
            transcript,
            target_tokens,
            oracle=oracle,
            system_prompt=system_prompt,
        )

        steps = state.get("steps", 0) + 1
        LOGGER.info(f"[{label}] Step {steps}/{state.get('max_steps', '?')}: calling model with {len(tools)} tools")

        try:
            response = await bound_model.ainvoke([SystemMessage(content=system_prompt)] + transcript)
        except Exception as e:
            raise ModelInvocationError(f"[{label}] model call failed: {e}", user_message=str(e)) from e

        return {"messages": [response], "steps": steps}

    return agent_node


def build_agent_graph(
    *,
    model: BaseChatModel,
    tools: Sequence[BaseTool],
    system_prompt: str,
    budgeter: ContextBudgeter,
    target_tokens: int,
    terminal_tools: Iterable[str] = (),
    oracle: Optional[TokenOracle] = None,
    max_tool_result_chars: int = DEFAULT_MAX_TOOL_RESULT_CHARS,
    head_ratio: float = DEFAULT_HEAD_RATIO,
    label: str = "agent",
):
    """Compile a step-loop graph for one agent run.

    Returns:
        Compiled LangGraph application over AgentLoopState
    """
    agent_node = build_agent_node(
        model=model,
        tools=tools,
        system_prompt=system_prompt,
        budgeter=budgeter,
        target_tokens=target_tokens,
        oracle=oracle,
        max_tool_result_chars=max_tool_result_chars,
        head_ratio=head_ratio,
        label=label,
    )
    tools_node = ToolNode(list(tools), handle_tool_errors=True)

    graph = StateGraph(AgentLoopState)
    graph.add_node("agent", agent_node)
    graph.add_node("tools", tools_node)

    graph.add_edge(START, "agent")
    graph.add_conditional_edges(
        "agent",
        agent_route,
        {
            "tools": "tools",
            "end": END,
        },
    )
    graph.add_conditional_edges(
        "tools",
        build_tools_route(terminal_tools),
        {
            "agent": "agent",
            "end": END,
        },
    )

    return graph.compile()


__all__ = ["build_agent_graph", "build_agent_node"]
