"""
Tool result truncation

Responsibilities:
1. Cap the size of a single tool result before it enters the transcript
2. Keep both the head and the tail of long outputs, with an explicit marker
3. Apply the cap to every ToolMessage of a conversation without mutating it
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Sequence

from langchain_core.messages import BaseMessage, ToolMessage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_RESULT_CHARS = 8000
DEFAULT_HEAD_RATIO = 0.7


def serialize_payload(payload: Any) -> str:
    """Render a tool payload as text (strings pass through, the rest is JSON)."""
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(payload)


def truncation_notice(original_length: int) -> str:
    return f"\n\n[... content truncated: was {original_length} chars ...]\n\n"


def truncate_tool_result(
    payload: Any,
    max_chars: int = DEFAULT_MAX_TOOL_RESULT_CHARS,
    head_ratio: float = DEFAULT_HEAD_RATIO,
) -> str:
    """
    Truncate a tool result to fit under max_chars

    Output is ``head + notice + tail`` and always strictly shorter than
    max_chars when truncation happens.

    Args:
        payload: Tool result (string or JSON-serialisable value)
        max_chars: Size cap in characters
        head_ratio: Share of the remaining space given to the head

    Returns:
        The serialised payload, truncated if it exceeded the cap
    """
    text = serialize_payload(payload)
    if len(text) <= max_chars:
        return text

    notice = truncation_notice(len(text))
    available = max_chars - len(notice) - 1
    if available < 2:
        # Cap too small for head + notice + tail, keep only what fits
        return notice.strip()[: max(max_chars - 1, 0)]

    head_size = max(1, int(available * head_ratio))
    tail_size = max(1, available - head_size)
    head_size = available - tail_size

    truncated = text[:head_size] + notice + text[-tail_size:]
    logger.info(f"Truncated tool result: {len(text)} chars -> {len(truncated)} chars")
    return truncated


def truncate_tool_results_in_messages(
    messages: Sequence[BaseMessage],
    max_chars: int = DEFAULT_MAX_TOOL_RESULT_CHARS,
    head_ratio: float = DEFAULT_HEAD_RATIO,
) -> List[BaseMessage]:
    """
    Return a copy of messages with oversize ToolMessage contents truncated

    Messages that fit are passed through as the same objects.
    """
    result: List[BaseMessage] = []
    for message in messages:
        if isinstance(message, ToolMessage):
            text = serialize_payload(message.content)
            if len(text) > max_chars:
                message = message.model_copy(
                    update={"content": truncate_tool_result(text, max_chars, head_ratio)}
                )
        result.append(message)
    return result


__all__ = [
    "DEFAULT_MAX_TOOL_RESULT_CHARS",
    "serialize_payload",
    "truncate_tool_result",
    "truncate_tool_results_in_messages",
    "truncation_notice",
]
