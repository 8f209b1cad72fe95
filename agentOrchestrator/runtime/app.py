"""Application assembly for agentOrchestrator.

This module builds the orchestration engine by:
1. Loading settings
2. Building the model resolver
3. Building the external tool registry
4. Wiring store, broadcaster, runner, dispatcher and pipeline together

The resulting Orchestrator exposes the public entry points:
start_orchestration, get_session_snapshot and subscribe.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from agentOrchestrator.agents import AgentRunner, OrchestrationPipeline, OrchestrationResult, SubAgentDispatcher
from agentOrchestrator.config import Settings, get_settings
from agentOrchestrator.context import ContextBudgeter
from agentOrchestrator.events import CompositePublisher, LoggingPublisher, Subscription, ThreadBroadcaster
from agentOrchestrator.sessions import InMemorySessionRepository, SessionRepository, SessionStore
from agentOrchestrator.tools import ToolRegistry, UserInputProvider, build_default_registry
from agentOrchestrator.utils.error_handler import format_error_message
from agentOrchestrator.utils.logging_utils import log_error

from .model_resolver import Credentials, ModelResolver, build_model_resolver

LOGGER = logging.getLogger(__name__)


class Orchestrator:
    """Public facade over the orchestration engine."""

    def __init__(
        self,
        *,
        settings: Settings,
        store: SessionStore,
        broadcaster: ThreadBroadcaster,
        pipeline: OrchestrationPipeline,
        model_resolver: ModelResolver,
        tool_registry: ToolRegistry,
    ) -> None:
        self.settings = settings
        self.store = store
        self.broadcaster = broadcaster
        self.pipeline = pipeline
        self.model_resolver = model_resolver
        self.tool_registry = tool_registry

    async def start_orchestration(
        self,
        thread_id: str,
        task_description: str,
        credentials: Optional[Credentials] = None,
    ) -> OrchestrationResult:
        """Plan and execute a complex task for a conversation thread.

        Never raises: every failure comes back as a result with success=False.
        """
        if not thread_id:
            return OrchestrationResult(success=False, summary="", error="No thread context available")

        try:
            model = self.model_resolver(credentials)
        except Exception as e:
            log_error(LOGGER, e, context=f"resolving model for thread {thread_id}")
            return OrchestrationResult(success=False, summary="", error=format_error_message(e))

        session = self.store.create_session(thread_id)
        LOGGER.info(f"[Orchestrator] Session {session.id} started: {task_description[:100]}")

        try:
            return await self.pipeline.run(session, task_description, model)
        except Exception as e:
            log_error(LOGGER, e, context=f"orchestration of session {session.id}")
            return OrchestrationResult(
                success=False,
                summary="Orchestration failed",
                tasks_summary=[],
                error=format_error_message(e),
            )

    def get_session_snapshot(self, thread_id: str) -> Optional[Dict[str, Any]]:
        return self.store.snapshot(thread_id)

    def subscribe(self, thread_id: str) -> Subscription:
        """Live events for a thread, preceded by a replay of its current state."""
        subscription = self.broadcaster.subscribe(thread_id)
        for event in self.store.replay_events(thread_id):
            subscription.push(event)
        return subscription


def build_orchestrator(
    settings: Optional[Settings] = None,
    *,
    model_resolver: Optional[ModelResolver] = None,
    tool_registry: Optional[ToolRegistry] = None,
    repository: Optional[SessionRepository] = None,
    user_input: Optional[UserInputProvider] = None,
    log_events: bool = True,
) -> Orchestrator:
    """Build the Orchestrator application.

    Args:
        settings: Application settings (loaded from .env when None)
        model_resolver: Credentials -> chat model (ChatOpenAI resolver when None)
        tool_registry: External tools (builtin registry when None)
        repository: Session repository (in-memory when None)
        user_input: Provider answering ask_user questions (None returns them to the client)
        log_events: Also write every notification to the log

    Returns:
        Configured Orchestrator
    """
    # ========== Step 1: Load Settings ==========
    settings = settings or get_settings()

    # ========== Step 2: Model Resolver ==========
    model_resolver = model_resolver or build_model_resolver(settings)

    # ========== Step 3: Tool Registry ==========
    tool_registry = tool_registry if tool_registry is not None else build_default_registry()

    # ========== Step 4: Notification Channel ==========
    broadcaster = ThreadBroadcaster()
    publisher = CompositePublisher([broadcaster, LoggingPublisher()]) if log_events else broadcaster

    # ========== Step 5: Engine ==========
    store = SessionStore(repository or InMemorySessionRepository(), publisher)
    runner = AgentRunner(settings, ContextBudgeter(settings), publisher)
    dispatcher = SubAgentDispatcher(runner, tool_registry, store, publisher, settings)
    pipeline = OrchestrationPipeline(
        store,
        runner,
        dispatcher,
        tool_registry=tool_registry,
        publisher=publisher,
        settings=settings,
        user_input=user_input,
    )

    LOGGER.info(f"[Orchestrator] Built with model {settings.models.model_id}, tools: {[t.name for t in tool_registry.list_tools()]}")

    return Orchestrator(
        settings=settings,
        store=store,
        broadcaster=broadcaster,
        pipeline=pipeline,
        model_resolver=model_resolver,
        tool_registry=tool_registry,
    )


__all__ = ["Orchestrator", "build_orchestrator"]
