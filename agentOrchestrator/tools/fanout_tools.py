"""explore / execute capabilities: fan work out to concurrent workers.

Both tools block until every worker in the batch has finished and return the
per-worker results in request order.
"""

from __future__ import annotations

import json
from typing import List

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from .context import NO_SESSION_ERROR, AgentToolContext

NO_WORKER_MODEL_ERROR = "No model available for sub-agents"


class ExploreInput(BaseModel):
    prompts: List[str] = Field(..., description="Array of exploration prompts, one per agent")


class Assignment(BaseModel):
    tasks: List[str] = Field(..., description="Task IDs this worker is responsible for")
    context: str = Field(default="", description="Background and instructions the worker needs")


class ExecuteInput(BaseModel):
    assignments: List[Assignment] = Field(..., description="One entry per execution worker")


def build_explore_tool(ctx: AgentToolContext) -> BaseTool:

    @tool("explore", args_schema=ExploreInput)
    async def explore(prompts: List[str]) -> str:
        """Launch exploration agents concurrently to gather information.

        Each prompt spawns a separate autonomous agent that researches and
        returns findings. Blocks until all agents complete; results come back
        in the same order as the prompts.
        """
        if ctx.dispatcher is None or ctx.model is None:
            return json.dumps({"error": NO_WORKER_MODEL_ERROR, "results": []})
        results = await ctx.dispatcher.explore(ctx, list(prompts))
        return json.dumps({"results": results}, ensure_ascii=False)

    return explore


def build_execute_tool(ctx: AgentToolContext) -> BaseTool:

    @tool("execute", args_schema=ExecuteInput)
    async def execute(assignments: List[Assignment]) -> str:
        """Spawn execution workers concurrently, one per assignment.

        Give each worker the ids of the tasks it owns plus the context it
        needs. Use this for independent work streams; blocks until every
        worker reports.
        """
        if ctx.dispatcher is None or ctx.model is None:
            return json.dumps({"error": NO_WORKER_MODEL_ERROR, "results": []})
        if ctx.session() is None:
            return json.dumps({"error": NO_SESSION_ERROR, "results": []})
        requests = []
        for item in assignments:
            if isinstance(item, BaseModel):
                item = item.model_dump()
            requests.append({"task_ids": list(item.get("tasks") or []), "context": item.get("context", "")})
        outcomes = await ctx.dispatcher.execute(ctx, requests)
        return json.dumps({"results": [o.to_dict() for o in outcomes]}, ensure_ascii=False)

    return execute


__all__ = ["Assignment", "ExecuteInput", "ExploreInput", "NO_WORKER_MODEL_ERROR", "build_execute_tool", "build_explore_tool"]
