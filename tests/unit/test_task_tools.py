"""Unit tests for task, signal and ask_user capabilities."""

import json

import pytest

from agentOrchestrator.sessions import SessionStatus, TaskStatus
from agentOrchestrator.tools import AgentToolContext, build_ask_user_tool, build_task_tools
from agentOrchestrator.tools.fanout_tools import build_explore_tool


async def call(tool, args):
    return json.loads(await tool.ainvoke(args))


def tools_by_name(ctx):
    return {t.name: t for t in build_task_tools(ctx)}


@pytest.fixture
def session(store):
    return store.create_session("thread-1")


@pytest.fixture
def ctx(store, session):
    return AgentToolContext(store=store, session_id=session.id, thread_id=session.thread_id)


class TestTaskTools:

    @pytest.mark.asyncio
    async def test_add_task_returns_id(self, ctx, session):
        result = await call(tools_by_name(ctx)["add_task"], {
            "title": "Fetch data", "description": "from the API", "type": "execute",
        })

        assert result["status"] == "created"
        assert session.tasks[result["taskId"]].title == "Fetch data"

    @pytest.mark.asyncio
    async def test_set_task_updates_status(self, ctx, session):
        tools = tools_by_name(ctx)
        task_id = (await call(tools["add_task"], {"title": "a", "description": "b"}))["taskId"]

        result = await call(tools["set_task"], {"taskId": task_id, "status": "done", "result": "42"})

        assert result == {"taskId": task_id, "status": "done", "updated": True}
        assert session.tasks[task_id].status == TaskStatus.DONE
        assert session.tasks[task_id].result == "42"

    @pytest.mark.asyncio
    async def test_view_tasks_filter(self, ctx, store, session):
        tools = tools_by_name(ctx)
        first = (await call(tools["add_task"], {"title": "a", "description": ""}))["taskId"]
        await call(tools["add_task"], {"title": "b", "description": ""})
        store.update_task_status(session.id, first, TaskStatus.CANCELLED)

        done = (await call(tools["view_tasks"], {"filter": "done"}))["tasks"]
        everything = (await call(tools["view_tasks"], {}))["tasks"]

        assert done == [{"id": first, "title": "a", "type": "execute", "status": "cancelled"}]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_clear_tasks(self, ctx, store, session):
        tools = tools_by_name(ctx)
        task_id = (await call(tools["add_task"], {"title": "a", "description": ""}))["taskId"]
        store.update_task_status(session.id, task_id, TaskStatus.DONE)

        assert await call(tools["clear_tasks"], {}) == {"cleared": True}
        assert session.tasks == {}

    @pytest.mark.asyncio
    async def test_no_session_reports_error(self, store):
        tools = tools_by_name(AgentToolContext(store=store, session_id=None))

        assert await call(tools["add_task"], {"title": "a", "description": ""}) == {
            "error": "No active agent session"
        }
        assert (await call(tools["view_tasks"], {}))["tasks"] == []

    @pytest.mark.asyncio
    async def test_contexts_are_isolated(self, store):
        one = store.create_session("t1")
        two = store.create_session("t2")

        await call(
            tools_by_name(AgentToolContext(store=store, session_id=one.id))["add_task"],
            {"title": "only in one", "description": ""},
        )

        assert len(one.tasks) == 1
        assert two.tasks == {}


class TestAskUser:

    @pytest.mark.asyncio
    async def test_without_provider_returns_request(self, ctx):
        result = await call(build_ask_user_tool(ctx), {
            "question": "Which city?",
            "type": "single_select",
            "options": [{"value": "ber", "label": "Berlin"}],
        })

        assert result["status"] == "awaiting_user_input"
        assert result["question"] == "Which city?"
        assert result["options"][0]["value"] == "ber"

    @pytest.mark.asyncio
    async def test_with_provider_waits_for_answer(self, store, session):
        seen = []

        async def provider(request):
            seen.append(store.get_session(session.id).status)
            return "Berlin"

        ctx = AgentToolContext(store=store, session_id=session.id, thread_id="thread-1", user_input=provider)
        store.update_status(session.id, SessionStatus.EXECUTING)

        result = await call(build_ask_user_tool(ctx), {"question": "Which city?"})

        assert result == {"status": "answered", "answer": "Berlin"}
        assert seen == [SessionStatus.WAITING_USER]
        assert session.status == SessionStatus.EXECUTING


class TestFanoutGuards:

    @pytest.mark.asyncio
    async def test_explore_without_model_reports_error(self, ctx):
        result = await call(build_explore_tool(ctx), {"prompts": ["a"]})

        assert result["results"] == []
        assert "error" in result
