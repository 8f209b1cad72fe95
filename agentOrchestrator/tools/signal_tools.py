"""Signal tools that end a worker's step loop.

These tools do no work. Calling one tells the router that the worker is
finished, and the dispatcher reads the worker's outcome from the call
arguments:

    if tool_calls contains submit_findings / report_completion:
        route to END
    else:
        route back to the agent
"""

from __future__ import annotations

import json
from typing import List, Optional

from langchain_core.tools import tool
from pydantic import BaseModel, Field


SUBMIT_FINDINGS = "submit_findings"
REPORT_COMPLETION = "report_completion"


class SubmitFindingsInput(BaseModel):
    summary: str = Field(..., description="Concise summary of what was found")
    details: Optional[str] = Field(default=None, description="Longer supporting details")
    sources: Optional[List[str]] = Field(default=None, description="URLs or file paths consulted")


class ReportCompletionInput(BaseModel):
    success: bool = Field(..., description="Whether all assigned tasks were completed")
    summary: str = Field(..., description="What was accomplished")
    errors: Optional[List[str]] = Field(default=None, description="Problems that blocked any task")


@tool(SUBMIT_FINDINGS, args_schema=SubmitFindingsInput)
def submit_findings(summary: str, details: Optional[str] = None, sources: Optional[List[str]] = None) -> str:
    """Submit your research findings and finish (signal tool).

    Call this exactly once, when the research is complete. The summary is
    what the planning agent receives, so make it specific and factual.
    """
    return json.dumps({"signal": "findings_submitted", "summary": summary}, ensure_ascii=False)


@tool(REPORT_COMPLETION, args_schema=ReportCompletionInput)
def report_completion(success: bool, summary: str, errors: Optional[List[str]] = None) -> str:
    """Report the outcome of your assigned tasks and finish (signal tool).

    Call this once every assigned task is done or cancelled. Set success to
    false and list the errors if anything could not be completed.
    """
    return json.dumps({"signal": "execution_reported", "success": success}, ensure_ascii=False)


__all__ = [
    "REPORT_COMPLETION",
    "SUBMIT_FINDINGS",
    "ReportCompletionInput",
    "SubmitFindingsInput",
    "report_completion",
    "submit_findings",
]
