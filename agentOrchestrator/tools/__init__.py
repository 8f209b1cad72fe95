"""Capabilities offered to agents and the external tool registry."""

from .ask_user import build_ask_user_tool
from .context import AgentToolContext, UserInputProvider
from .fanout_tools import build_execute_tool, build_explore_tool
from .registry import ToolMeta, ToolRegistry, build_default_registry
from .signal_tools import REPORT_COMPLETION, SUBMIT_FINDINGS, report_completion, submit_findings
from .task_tools import build_task_tools

__all__ = [
    "AgentToolContext",
    "REPORT_COMPLETION",
    "SUBMIT_FINDINGS",
    "ToolMeta",
    "ToolRegistry",
    "UserInputProvider",
    "build_ask_user_tool",
    "build_default_registry",
    "build_execute_tool",
    "build_explore_tool",
    "build_task_tools",
    "report_completion",
    "submit_findings",
]
