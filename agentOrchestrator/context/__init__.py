"""Context Budgeter: fits conversation history into a token budget."""

from .budgeter import (
    ContextBudgeter,
    TokenOracle,
    build_token_oracle,
    estimate_message_tokens,
    estimate_tokens,
    safe_window_start,
)
from .token_budget import compute_target_tokens, estimate_tools_overhead, get_max_context_tokens
from .truncator import truncate_tool_result, truncate_tool_results_in_messages

__all__ = [
    "ContextBudgeter",
    "TokenOracle",
    "build_token_oracle",
    "compute_target_tokens",
    "estimate_message_tokens",
    "estimate_tokens",
    "estimate_tools_overhead",
    "get_max_context_tokens",
    "safe_window_start",
    "truncate_tool_result",
    "truncate_tool_results_in_messages",
]
