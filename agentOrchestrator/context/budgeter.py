"""
Context budgeter

Responsibilities:
1. Fit a conversation into a token budget by dropping its oldest turns
2. Prefer an exact token counter (binary search over suffix length)
3. Fall back to a character-ratio estimate when no counter works
4. Always keep the most recent turns, even over budget
5. Never open the window on a tool result whose tool call was dropped

The output is always a contiguous suffix of the input; the input is never
mutated.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, List, Optional, Sequence

from langchain_core.messages import BaseMessage, SystemMessage, ToolMessage

logger = logging.getLogger(__name__)

TokenOracle = Callable[[Sequence[BaseMessage]], int]

DEFAULT_CHARS_PER_TOKEN = 2.0
DEFAULT_MIN_KEEP = 2


def estimate_tokens(text: str, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> int:
    """Approximate token count of a text."""
    if not text:
        return 0
    return math.ceil(len(text) / chars_per_token)


def message_text(message: BaseMessage) -> str:
    """Plain text of a message (text blocks only for multi-part content)."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


def message_payloads(message: BaseMessage) -> List[Any]:
    """Structured tool payloads carried by a message."""
    payloads: List[Any] = []
    content = message.content
    if not isinstance(content, str):
        for block in content:
            if isinstance(block, dict) and block.get("type") != "text":
                payloads.append(block)
    tool_calls = getattr(message, "tool_calls", None)
    if tool_calls:
        payloads.append(tool_calls)
    return payloads


def estimate_message_tokens(message: BaseMessage, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> int:
    count = estimate_tokens(message_text(message), chars_per_token)
    for payload in message_payloads(message):
        count += estimate_tokens(json.dumps(payload, ensure_ascii=False, default=str), chars_per_token)
    return count


def safe_window_start(messages: Sequence[BaseMessage], start: int) -> int:
    """Move a window start so the window never opens on a ToolMessage.

    A ToolMessage whose AIMessage(tool_calls) was dropped is rejected by
    OpenAI-compatible APIs. Skips forward past leading tool results; when
    only tool results would remain, steps back to the AIMessage that issued
    them instead.
    """
    if start >= len(messages):
        return start

    index = start
    while index < len(messages) and isinstance(messages[index], ToolMessage):
        index += 1
    if index < len(messages):
        return index

    index = start
    while index > 0 and isinstance(messages[index], ToolMessage):
        index -= 1
    return index


class ContextBudgeter:
    """
    Trims conversation history to a token budget

    Deterministic and idempotent: trimming an already fitting window returns
    it unchanged.
    """

    def __init__(self, settings=None):
        context_settings = getattr(settings, "context", settings)
        self.chars_per_token = getattr(context_settings, "chars_per_token", DEFAULT_CHARS_PER_TOKEN)
        self.min_keep = getattr(context_settings, "min_keep_messages", DEFAULT_MIN_KEEP)

    def fit(
        self,
        messages: Sequence[BaseMessage],
        target_tokens: int,
        oracle: Optional[TokenOracle] = None,
        system_prompt: Optional[str] = None,
    ) -> List[BaseMessage]:
        """
        Return the longest suffix of messages that fits target_tokens

        Args:
            messages: Conversation window, oldest first
            target_tokens: Budget already net of response space and tool overhead
            oracle: Exact token counter for the active model family (optional)
            system_prompt: System prompt sent alongside the window (counted, never dropped)

        Returns:
            A suffix of messages; at least min(min_keep, len(messages)) long
            unless that would start it on an orphaned tool result
        """
        messages = list(messages)
        min_keep = min(self.min_keep, len(messages))

        if oracle is not None:
            try:
                return self._fit_exact(messages, target_tokens, oracle, system_prompt, min_keep)
            except Exception as e:
                logger.warning(f"Token counting failed ({type(e).__name__}: {e}), falling back to estimation")

        return self._fit_estimated(messages, target_tokens, system_prompt, min_keep)

    def _fit_exact(
        self,
        messages: List[BaseMessage],
        target_tokens: int,
        oracle: TokenOracle,
        system_prompt: Optional[str],
        min_keep: int,
    ) -> List[BaseMessage]:
        prefix = [SystemMessage(content=system_prompt)] if system_prompt else []

        def count(keep: int) -> int:
            return oracle(prefix + messages[len(messages) - keep:])

        total = count(len(messages))
        if total <= target_tokens:
            return messages

        logger.info(f"Trimming required: {total} tokens > {target_tokens} target ({len(messages)} messages)")

        # Largest suffix length in [min_keep, len) whose exact count fits
        low, high = min_keep, len(messages)
        while low < high:
            mid = (low + high + 1) // 2
            if count(mid) <= target_tokens:
                low = mid
            else:
                high = mid - 1

        kept = messages[safe_window_start(messages, len(messages) - low):]
        logger.info(f"Kept {len(kept)}/{len(messages)} messages (exact count)")
        return kept

    def _fit_estimated(
        self,
        messages: List[BaseMessage],
        target_tokens: int,
        system_prompt: Optional[str],
        min_keep: int,
    ) -> List[BaseMessage]:
        counts = [estimate_message_tokens(m, self.chars_per_token) for m in messages]
        current = estimate_tokens(system_prompt or "", self.chars_per_token) + sum(counts)

        if current <= target_tokens:
            return messages

        logger.info(f"Trimming: ~{current} tokens > {target_tokens} target ({len(messages)} messages)")

        start = 0
        while current > target_tokens and len(messages) - start > min_keep:
            current -= counts[start]
            start += 1

        start = safe_window_start(messages, start)
        current = estimate_tokens(system_prompt or "", self.chars_per_token) + sum(counts[start:])
        kept = messages[start:]
        logger.info(f"Kept {len(kept)}/{len(messages)} messages (~{current} tokens)")
        return kept


def build_token_oracle(model: Any, enabled: bool = True) -> Optional[TokenOracle]:
    """Exact counter backed by the chat model's own tokenizer, if it has one."""
    if not enabled or model is None:
        return None
    counter = getattr(model, "get_num_tokens_from_messages", None)
    if counter is None:
        return None

    def oracle(messages: Sequence[BaseMessage]) -> int:
        return counter(list(messages))

    return oracle


__all__ = [
    "ContextBudgeter",
    "TokenOracle",
    "build_token_oracle",
    "estimate_message_tokens",
    "estimate_tokens",
    "message_payloads",
    "message_text",
]
