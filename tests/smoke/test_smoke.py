"""Smoke tests for quick validation.

Smoke tests are fast, critical-path tests that drive the assembled
Orchestrator end to end with a scripted model. No network access.
"""

import re

import pytest
from langchain_core.messages import ToolMessage

from agentOrchestrator import Credentials, build_orchestrator
from agentOrchestrator.graph.prompts import PLAN_AGENT_PROMPT
from agentOrchestrator.runtime.model_resolver import build_model_resolver
from agentOrchestrator.tools import build_default_registry
from agentOrchestrator.utils.error_handler import MissingCredentialsError
from tests.support.scripted_model import ScriptedChatModel, ai_text, ai_tool_call, system_prompt_of


def two_task_script(messages):
    """Plans two tasks, then the executor finishes both."""
    prompt = system_prompt_of(messages)
    step = len([m for m in messages if isinstance(m, ToolMessage)])
    if prompt.startswith(PLAN_AGENT_PROMPT):
        titles = ["Gather input", "Write report"]
        if step < len(titles):
            return ai_tool_call("add_task", {"title": titles[step], "description": "", "type": "execute"})
        return ai_text("Two step plan")
    ids = re.findall(r"^- \[([^\]]+)\]", prompt, flags=re.MULTILINE)
    if step < len(ids):
        return ai_tool_call("set_task", {"taskId": ids[step], "status": "done", "result": "ok"})
    return ai_text("Report written")


@pytest.fixture
def orchestrator(settings):
    model = ScriptedChatModel(responder=two_task_script)
    return build_orchestrator(
        settings,
        model_resolver=lambda credentials: model,
        tool_registry=build_default_registry(),
        log_events=False,
    )


class TestOrchestrationFlow:
    """End-to-end run through the public facade."""

    @pytest.mark.asyncio
    async def test_start_orchestration_runs_both_stages(self, orchestrator):
        subscription = orchestrator.subscribe("thread-1")

        result = await orchestrator.start_orchestration("thread-1", "Write a report")

        assert result.success is True
        assert result.summary == "Report written"
        assert [t["status"] for t in result.tasks_summary] == ["done", "done"]

        types = [e.type.value for e in subscription.drain()]
        assert types[0] == "session_created"
        assert types.count("task_created") == 2
        assert types[-1] == "session_complete"
        subscription.close()

    @pytest.mark.asyncio
    async def test_snapshot_and_replay(self, orchestrator):
        await orchestrator.start_orchestration("thread-1", "Write a report")

        snapshot = orchestrator.get_session_snapshot("thread-1")
        assert snapshot["session"]["status"] == "complete"
        assert len(snapshot["tasks"]) == 2

        subscription = orchestrator.subscribe("thread-1")
        replay = subscription.drain()
        assert [e.type.value for e in replay] == ["session_updated", "task_updated", "task_updated"]
        assert replay[0].payload["session"]["status"] == "complete"
        subscription.close()

    def test_unknown_thread_has_no_snapshot(self, orchestrator):
        assert orchestrator.get_session_snapshot("nobody") is None


class TestFailurePaths:
    """Failures come back as results, never as exceptions."""

    @pytest.mark.asyncio
    async def test_missing_thread(self, orchestrator):
        result = await orchestrator.start_orchestration("", "anything")

        assert result.success is False
        assert result.error == "No thread context available"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, settings):
        settings.models.api_key = None

        def resolver(credentials):
            raise MissingCredentialsError("no key", user_message="No API key available for plan agent")

        orchestrator = build_orchestrator(settings, model_resolver=resolver, log_events=False)

        result = await orchestrator.start_orchestration("thread-1", "anything")

        assert result.success is False
        assert result.error == "No API key available for plan agent"
        assert orchestrator.get_session_snapshot("thread-1") is None

    def test_default_resolver_requires_key(self, settings):
        settings.models.api_key = None
        resolver = build_model_resolver(settings)

        with pytest.raises(MissingCredentialsError) as excinfo:
            resolver(Credentials())

        assert excinfo.value.user_message == "No API key available for plan agent"

    def test_default_resolver_prefers_request_credentials(self, settings):
        model = build_model_resolver(settings)(Credentials(api_key="request-key"))

        assert model.openai_api_key.get_secret_value() == "request-key"
