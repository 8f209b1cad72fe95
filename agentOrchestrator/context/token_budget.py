"""
Token budget helpers

Responsibilities:
1. Know the usable context size of a provider/model, net of response space
2. Estimate the overhead of the tool schemas bound to a model call
3. Combine both into the target handed to the budgeter
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from langchain_core.tools import BaseTool
from langchain_core.utils.function_calling import convert_to_openai_tool

from .budgeter import DEFAULT_CHARS_PER_TOKEN, estimate_tokens

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_BUFFER = 8000

# Substring of model id -> context window (tokens)
MODEL_CONTEXT_WINDOWS = {
    "qwen": 30_000,
    "llama": 120_000,
    "deepseek": 60_000,
}


def get_max_context_tokens(
    provider: str,
    model: Optional[str] = None,
    context_window: Optional[int] = None,
    response_buffer: int = DEFAULT_RESPONSE_BUFFER,
) -> int:
    """
    Usable prompt budget for a provider/model

    Args:
        provider: Provider family ("anthropic", "openai", "ollama", ...)
        model: Model id
        context_window: Configured window, used for OpenAI-compatible endpoints
        response_buffer: Tokens reserved for the reply

    Returns:
        Context window minus the response buffer
    """
    provider = (provider or "").lower()
    model_id = (model or "").lower()

    if provider == "anthropic":
        return 200_000 - response_buffer

    for key, window in MODEL_CONTEXT_WINDOWS.items():
        if key in model_id:
            return window - response_buffer

    if provider == "openai" and context_window:
        return context_window - response_buffer

    return max(8000, 16_000 - response_buffer)


def estimate_tools_overhead(
    tools: Sequence[BaseTool],
    chars_per_token: float = DEFAULT_CHARS_PER_TOKEN,
) -> int:
    """Estimated tokens taken by the JSON schemas of the bound tools."""
    total = 0
    for tool in tools:
        try:
            schema = convert_to_openai_tool(tool)
        except Exception as e:
            logger.debug(f"Could not convert tool {getattr(tool, 'name', tool)} to schema: {e}")
            schema = {"name": getattr(tool, "name", ""), "description": getattr(tool, "description", "")}
        total += estimate_tokens(json.dumps(schema, ensure_ascii=False, default=str), chars_per_token)
    return total


def compute_target_tokens(
    max_context_tokens: int,
    tools: Sequence[BaseTool] = (),
    chars_per_token: float = DEFAULT_CHARS_PER_TOKEN,
) -> int:
    """Budget left for the transcript once tool definitions are accounted for."""
    return max(0, max_context_tokens - estimate_tools_overhead(tools, chars_per_token))


__all__ = [
    "MODEL_CONTEXT_WINDOWS",
    "compute_target_tokens",
    "estimate_tools_overhead",
    "get_max_context_tokens",
]
