"""Unit tests for the two-stage orchestration pipeline."""

import re

import pytest
from langchain_core.messages import ToolMessage

from agentOrchestrator.agents import AgentRunner, OrchestrationPipeline, SubAgentDispatcher
from agentOrchestrator.graph.prompts import EXECUTOR_AGENT_PROMPT, PLAN_AGENT_PROMPT, SUB_EXECUTOR_PROMPT
from agentOrchestrator.sessions import SessionStatus, TaskStatus
from agentOrchestrator.tools import ToolRegistry
from tests.support.scripted_model import ai_text, ai_tool_call, system_prompt_of


def step_of(messages):
    return len([m for m in messages if isinstance(m, ToolMessage)])


def pending_ids(messages):
    return re.findall(r"^- \[([^\]]+)\]", system_prompt_of(messages), flags=re.MULTILINE)


def assigned_ids(messages):
    match = re.search(r"Assigned tasks: (.*)\n", system_prompt_of(messages))
    return match.group(1).split(", ")


class StagedModel:
    """Responder that plays the planner, the executor and sub-executors."""

    def __init__(self, titles=(), executor=None, planner_failure=None):
        self.titles = list(titles)
        self.executor = executor
        self.planner_failure = planner_failure
        self.stages = []

    def __call__(self, messages):
        prompt = system_prompt_of(messages)
        if prompt.startswith(PLAN_AGENT_PROMPT):
            self.stages.append("plan")
            return self.plan(messages)
        if prompt.startswith(EXECUTOR_AGENT_PROMPT):
            self.stages.append("execute")
            return self.executor(messages)
        if prompt.startswith(SUB_EXECUTOR_PROMPT):
            self.stages.append("sub_executor")
            return self.sub_executor(messages)
        raise AssertionError(f"unexpected prompt: {prompt[:40]}")

    def plan(self, messages):
        step = step_of(messages)
        if step < len(self.titles):
            return ai_tool_call("add_task", {"title": self.titles[step], "description": "", "type": "execute"})
        if self.planner_failure is not None:
            raise self.planner_failure
        return ai_text(f"Plan with {len(self.titles)} tasks")

    @staticmethod
    def sub_executor(messages):
        ids = assigned_ids(messages)
        step = step_of(messages)
        if step < len(ids):
            return ai_tool_call("set_task", {"taskId": ids[step], "status": "done", "result": "ok"})
        return ai_tool_call("report_completion", {"success": True, "summary": "done"})


def finishing_executor(skip=0, failure=None):
    """Executor marking pending tasks done directly, leaving the last `skip` untouched."""
    def executor(messages):
        ids = pending_ids(messages)
        targets = ids[:len(ids) - skip]
        step = step_of(messages)
        if step < len(targets):
            return ai_tool_call("set_task", {"taskId": targets[step], "status": "done", "result": "ok"})
        if failure is not None:
            if step == len(targets):
                return ai_tool_call("set_task", {"taskId": ids[-1], "status": "in_progress"})
            raise failure
        return ai_text("Executed what I could")
    return executor


def delegating_executor(messages):
    """Executor handing tasks to two workers via execute."""
    ids = pending_ids(messages)
    if step_of(messages) == 0:
        return ai_tool_call("execute", {"assignments": [
            {"tasks": ids[:1], "context": "first part"},
            {"tasks": ids[1:], "context": "the rest"},
        ]})
    return ai_text("All tasks delegated and finished")


@pytest.fixture
def session(store):
    return store.create_session("thread-1")


@pytest.fixture
def pipeline(settings, store, publisher):
    runner = AgentRunner(settings, publisher=publisher)
    registry = ToolRegistry()
    dispatcher = SubAgentDispatcher(runner, registry, store, publisher, settings)
    return OrchestrationPipeline(store, runner, dispatcher, registry, publisher, settings)


class TestPipeline:

    @pytest.mark.asyncio
    async def test_plan_without_execute_tasks_completes(self, pipeline, session, scripted_model):
        script = StagedModel(titles=[])

        result = await pipeline.run(session, "say hello", scripted_model(responder=script))

        assert result.success is True
        assert result.summary == "Plan with 0 tasks"
        assert result.tasks_summary == []
        assert script.stages == ["plan"]
        assert session.status == SessionStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_all_tasks_executed(self, pipeline, session, scripted_model):
        script = StagedModel(titles=["a", "b", "c"], executor=finishing_executor())

        result = await pipeline.run(session, "do three things", scripted_model(responder=script))

        assert result.success is True
        assert result.summary == "Executed what I could"
        assert [t["status"] for t in result.tasks_summary] == ["done", "done", "done"]
        assert [t["title"] for t in result.tasks_summary] == ["a", "b", "c"]
        assert session.status == SessionStatus.COMPLETE
        assert result.to_dict()["tasksSummary"][0] == {"title": "a", "type": "execute", "status": "done"}

    @pytest.mark.asyncio
    async def test_execution_through_workers(self, pipeline, session, scripted_model, publisher):
        script = StagedModel(titles=["a", "b", "c"], executor=delegating_executor)

        result = await pipeline.run(session, "do three things", scripted_model(responder=script))

        assert result.success is True
        assert all(t.status == TaskStatus.DONE for t in session.tasks.values())
        assert script.stages.count("sub_executor") >= 2
        assert len(publisher.of_type("sub_executor_done")) == 2
        calls = [e.payload["toolCall"]["toolName"] for e in publisher.of_type("tool_call")]
        assert "execute" in calls

    @pytest.mark.asyncio
    async def test_incomplete_execution_cancels_leftovers(self, pipeline, session, scripted_model):
        script = StagedModel(titles=["a", "b", "c"], executor=finishing_executor(skip=1))

        result = await pipeline.run(session, "do three things", scripted_model(responder=script))

        assert result.success is False
        assert result.error is None
        tasks = list(session.tasks.values())
        assert [t.status for t in tasks] == [TaskStatus.DONE, TaskStatus.DONE, TaskStatus.CANCELLED]
        assert tasks[2].result == "execution incomplete"
        assert session.error is None
        assert session.status == SessionStatus.EXECUTING

    @pytest.mark.asyncio
    async def test_plan_failure_marks_session_error(self, pipeline, session, scripted_model, store):
        script = StagedModel(titles=["a"], planner_failure=RuntimeError("model offline"))

        original_plan = script.plan

        def plan(messages):
            # Put the created task in progress before the model dies.
            if step_of(messages) == 1:
                task_id = next(iter(session.tasks))
                store.update_task_status(session.id, task_id, TaskStatus.IN_PROGRESS)
            return original_plan(messages)

        script.plan = plan

        result = await pipeline.run(session, "anything", scripted_model(responder=script))

        assert result.success is False
        assert result.summary == "Planning failed"
        assert result.error == "model offline"
        task = next(iter(session.tasks.values()))
        assert task.status == TaskStatus.CANCELLED
        assert task.result == "Planning error: model offline"
        assert session.status == SessionStatus.ERROR
        assert session.error == "model offline"
        assert "execute" not in script.stages

    @pytest.mark.asyncio
    async def test_execute_failure_marks_session_error(self, pipeline, session, scripted_model, publisher):
        script = StagedModel(
            titles=["a", "b"],
            executor=finishing_executor(skip=1, failure=RuntimeError("quota exceeded")),
        )

        result = await pipeline.run(session, "two things", scripted_model(responder=script))

        assert result.success is False
        assert result.summary == "Execution failed"
        assert result.error == "quota exceeded"
        first, second = session.tasks.values()
        assert first.status == TaskStatus.DONE
        assert second.status == TaskStatus.CANCELLED
        assert second.result == "Error: quota exceeded"
        assert session.status == SessionStatus.ERROR
        assert publisher.of_type("session_error")[0].payload["session"]["error"] == "quota exceeded"

    @pytest.mark.asyncio
    async def test_stage_tool_sets(self, pipeline, session, scripted_model, monkeypatch):
        script = StagedModel(titles=["a"], executor=finishing_executor())
        offered = {}
        original_run = pipeline.runner.run

        async def spy(**kwargs):
            offered.setdefault(kwargs["label"], sorted(t.name for t in kwargs["tools"]))
            return await original_run(**kwargs)

        monkeypatch.setattr(pipeline.runner, "run", spy)

        await pipeline.run(session, "one thing", scripted_model(responder=script))

        assert offered["PlanAgent"] == [
            "add_task", "ask_user", "clear_tasks", "explore", "set_task", "view_tasks",
        ]
        assert offered["ExecutorAgent"] == ["ask_user", "execute", "set_task", "view_tasks"]
