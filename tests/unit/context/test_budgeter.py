"""Unit tests for the context budgeter."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agentOrchestrator.context import (
    ContextBudgeter,
    estimate_message_tokens,
    estimate_tokens,
    get_max_context_tokens,
)
from agentOrchestrator.context.budgeter import build_token_oracle


def make_window(n, size=100):
    messages = []
    for i in range(n):
        cls = HumanMessage if i % 2 == 0 else AIMessage
        messages.append(cls(content=f"{i:03d}" + "x" * size))
    return messages


def char_oracle(messages):
    return sum(len(str(m.content)) for m in messages)


class TestEstimates:

    def test_estimate_tokens_rounds_up(self):
        assert estimate_tokens("abc", 2.0) == 2
        assert estimate_tokens("", 2.0) == 0

    def test_tool_call_payload_counts(self):
        plain = AIMessage(content="hi")
        with_call = AIMessage(content="hi", tool_calls=[{"name": "fetch", "args": {"url": "u" * 100}, "id": "1"}])

        assert estimate_message_tokens(with_call) > estimate_message_tokens(plain)


class TestHeuristicFit:

    def test_fitting_window_returned_unchanged(self):
        messages = make_window(4, size=10)
        assert ContextBudgeter().fit(messages, 10_000) == messages

    def test_drops_oldest_first(self):
        messages = make_window(10, size=100)
        per_message = estimate_message_tokens(messages[0])

        kept = ContextBudgeter().fit(messages, per_message * 4)

        assert kept == messages[-4:]

    def test_floor_keeps_last_two(self):
        messages = make_window(6, size=1000)

        kept = ContextBudgeter().fit(messages, 1)

        assert kept == messages[-2:]

    def test_floor_with_single_message(self):
        messages = make_window(1, size=1000)
        assert ContextBudgeter().fit(messages, 1) == messages

    def test_system_prompt_counts_against_budget(self):
        messages = make_window(6, size=100)
        budget = sum(estimate_message_tokens(m) for m in messages)

        without = ContextBudgeter().fit(messages, budget)
        with_prompt = ContextBudgeter().fit(messages, budget, system_prompt="s" * 200)

        assert without == messages
        assert len(with_prompt) < len(messages)

    @pytest.mark.parametrize("budget", [1, 50, 150, 400, 2000])
    def test_result_is_suffix_and_idempotent(self, budget):
        messages = make_window(12, size=60)
        budgeter = ContextBudgeter()

        kept = budgeter.fit(messages, budget)

        assert kept == messages[len(messages) - len(kept):]
        assert budgeter.fit(kept, budget) == kept
        total = sum(estimate_message_tokens(m) for m in kept)
        assert total <= budget or kept == messages[-2:]


class TestExactFit:

    def test_binary_search_finds_longest_fitting_suffix(self):
        messages = make_window(20, size=97)  # 100 chars each
        calls = []

        def oracle(window):
            calls.append(len(window))
            return char_oracle(window)

        kept = ContextBudgeter().fit(messages, 750, oracle=oracle)

        assert kept == messages[-7:]
        assert len(calls) <= 7

    def test_system_prompt_included_in_oracle_calls(self):
        seen = []

        def oracle(window):
            seen.append(window[0])
            return char_oracle(window)

        ContextBudgeter().fit(make_window(3), 10_000, oracle=oracle, system_prompt="sys")

        assert isinstance(seen[0], SystemMessage)

    def test_oracle_failure_falls_back_to_estimate(self):
        messages = make_window(10, size=100)
        per_message = estimate_message_tokens(messages[0])

        def broken(window):
            raise RuntimeError("tokenizer unavailable")

        kept = ContextBudgeter().fit(messages, per_message * 3, oracle=broken)

        assert kept == messages[-3:]

    def test_exact_floor(self):
        messages = make_window(5, size=500)
        assert ContextBudgeter().fit(messages, 10, oracle=char_oracle) == messages[-2:]

    def test_build_token_oracle_disabled(self):
        assert build_token_oracle(object(), enabled=False) is None
        assert build_token_oracle(None) is None


class TestMaxContextTokens:

    @pytest.mark.parametrize("provider,model,expected", [
        ("anthropic", "claude-sonnet", 192_000),
        ("ollama", "qwen2.5:7b", 22_000),
        ("ollama", "llama3.1", 112_000),
        ("openai", "deepseek-chat", 52_000),
        ("ollama", "mistral", 8_000),
    ])
    def test_known_families(self, provider, model, expected):
        assert get_max_context_tokens(provider, model) == expected

    def test_openai_uses_configured_window(self):
        assert get_max_context_tokens("openai", "gpt-4o", context_window=128_000) == 120_000


class TestToolMessagesInWindow:

    def test_tool_message_counted_by_text(self):
        message = ToolMessage(content="r" * 40, tool_call_id="1")
        assert estimate_message_tokens(message, 2.0) == 20


def tool_turns():
    """Human, then two tool-calling AI turns each answered by a ToolMessage."""
    return [
        HumanMessage(content="task"),
        AIMessage(content="calling fetch", tool_calls=[{"name": "fetch", "args": {}, "id": "c1"}]),
        ToolMessage(content="r" * 400, tool_call_id="c1"),
        AIMessage(content="calling check", tool_calls=[{"name": "check", "args": {}, "id": "c2"}]),
        ToolMessage(content="ok", tool_call_id="c2"),
    ]


class TestToolCallPairs:

    def test_heuristic_never_starts_on_orphaned_tool_result(self):
        messages = tool_turns()
        budget = sum(estimate_message_tokens(m) for m in messages[-3:])
        budgeter = ContextBudgeter()

        kept = budgeter.fit(messages, budget)

        assert kept == messages[3:]
        assert budgeter.fit(kept, budget) == kept

    def test_exact_never_starts_on_orphaned_tool_result(self):
        messages = tool_turns()
        budget = char_oracle(messages[-3:])

        kept = ContextBudgeter().fit(messages, budget, oracle=char_oracle)

        assert kept == messages[3:]
        assert isinstance(kept[0], AIMessage)

    def test_tool_only_tail_keeps_issuing_call(self):
        messages = [
            HumanMessage(content="task"),
            AIMessage(content="", tool_calls=[
                {"name": "fetch", "args": {}, "id": "c1"},
                {"name": "fetch", "args": {}, "id": "c2"},
            ]),
            ToolMessage(content="a" * 1000, tool_call_id="c1"),
            ToolMessage(content="b" * 1000, tool_call_id="c2"),
        ]

        kept = ContextBudgeter().fit(messages, 1)

        assert kept == messages[1:]
