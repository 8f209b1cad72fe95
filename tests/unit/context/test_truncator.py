"""Unit tests for tool-result truncation."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage, ToolMessage

from agentOrchestrator.context import truncate_tool_result, truncate_tool_results_in_messages


class TestTruncateToolResult:

    def test_short_payload_untouched(self):
        assert truncate_tool_result("hello", max_chars=100) == "hello"

    @pytest.mark.parametrize("cap", [120, 500, 8000])
    def test_long_payload_keeps_head_marker_tail(self, cap):
        text = "HEAD" + "x" * 20000 + "TAIL"

        result = truncate_tool_result(text, max_chars=cap)

        assert len(result) < cap
        assert "[... content truncated: was 20008 chars ...]" in result
        head, _, tail = result.partition("\n\n[... content truncated")
        assert text.startswith(head) and head.startswith("HEAD")
        assert text.endswith(tail.split("...]\n\n", 1)[1])
        assert result.endswith("TAIL")

    def test_head_gets_larger_share(self):
        text = "".join(chr(ord("a") + i % 26) for i in range(30000))

        result = truncate_tool_result(text, max_chars=1000, head_ratio=0.7)

        head, _, rest = result.partition("\n\n[...")
        tail = rest.split("...]\n\n", 1)[1]
        assert len(head) > len(tail)

    def test_structured_payload_is_serialised(self):
        payload = {"rows": ["r" * 50] * 200}

        result = truncate_tool_result(payload, max_chars=300)

        assert result.startswith('{"rows"')
        assert len(result) < 300

    def test_tiny_cap_still_respected(self):
        assert len(truncate_tool_result("y" * 1000, max_chars=10)) < 10


class TestTruncateMessages:

    def test_only_oversize_tool_messages_replaced(self):
        big = ToolMessage(content="z" * 5000, tool_call_id="1", name="fetch")
        small = ToolMessage(content="ok", tool_call_id="2", name="fetch")
        human = HumanMessage(content="q" * 5000)
        messages = [human, AIMessage(content="hi"), big, small]

        result = truncate_tool_results_in_messages(messages, max_chars=1000)

        assert result[0] is human
        assert result[3] is small
        assert len(result[2].content) < 1000
        assert result[2].tool_call_id == "1"
        assert big.content == "z" * 5000
