"""ask_user tool - the agent asks the user a question.

With a user-input provider configured the tool blocks until the answer
arrives and the session shows waiting_user meanwhile. Without one, the
question is returned as an awaiting_user_input payload for the client to
render.
"""

from __future__ import annotations

import json
import logging
from typing import List, Literal, Optional

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from agentOrchestrator.sessions.models import SessionStatus

from .context import AgentToolContext

LOGGER = logging.getLogger(__name__)


class AskUserOption(BaseModel):
    value: str = Field(..., description="Value returned when selected")
    label: str = Field(..., description="Text shown to the user")
    description: Optional[str] = Field(default=None, description="Extra explanation for the option")


class AskUserInput(BaseModel):
    question: str = Field(..., description="The question to ask (clear and specific)")
    type: Literal["confirm", "single_select", "multi_select", "text"] = Field(
        default="text",
        description="confirm = yes/no, single_select / multi_select = pick from options, text = free input",
    )
    options: Optional[List[AskUserOption]] = Field(default=None, description="Choices for select questions")
    page_size: Optional[int] = Field(default=None, description="Options shown per page")
    placeholder: Optional[str] = Field(default=None, description="Placeholder for text input")
    allow_cancel: bool = Field(default=True, description="Whether the user may dismiss the question")


def build_ask_user_tool(ctx: AgentToolContext) -> BaseTool:
    """Build ask_user bound to one run's context."""

    @tool("ask_user", args_schema=AskUserInput)
    async def ask_user(
        question: str,
        type: str = "text",
        options: Optional[List[AskUserOption]] = None,
        page_size: Optional[int] = None,
        placeholder: Optional[str] = None,
        allow_cancel: bool = True,
    ) -> str:
        """Ask the user for clarification or a decision.

        Use only when the request is ambiguous and you cannot resolve it
        yourself. Offer options for select questions.
        """
        request = {
            "question": question,
            "type": type,
            "options": [o.model_dump() if isinstance(o, BaseModel) else o for o in options] if options else None,
            "page_size": page_size,
            "placeholder": placeholder,
            "allow_cancel": allow_cancel,
        }
        request = {k: v for k, v in request.items() if v is not None}

        if ctx.user_input is None:
            return json.dumps({"status": "awaiting_user_input", **request}, ensure_ascii=False)

        session = ctx.session()
        previous = session.status if session else None
        if session:
            ctx.store.update_status(session.id, SessionStatus.WAITING_USER)
        LOGGER.info(f"[ask_user] Waiting for answer: {question}")
        try:
            answer = await ctx.user_input(request)
        finally:
            if session and previous is not None:
                ctx.store.update_status(session.id, previous)

        return json.dumps({"status": "answered", "answer": answer}, ensure_ascii=False, default=str)

    return ask_user


__all__ = ["AskUserInput", "AskUserOption", "build_ask_user_tool"]
