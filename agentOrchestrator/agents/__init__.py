"""Agent runs: step-loop runner, sub-agent dispatcher and the two-stage pipeline."""

from .dispatcher import ExecutionAssignment, SubAgentDispatcher, WorkerOutcome
from .pipeline import OrchestrationPipeline, OrchestrationResult, StageResult
from .runner import AgentRunOutput, AgentRunner, EventScope

__all__ = [
    "AgentRunOutput",
    "AgentRunner",
    "EventScope",
    "ExecutionAssignment",
    "OrchestrationPipeline",
    "OrchestrationResult",
    "StageResult",
    "SubAgentDispatcher",
    "WorkerOutcome",
]
