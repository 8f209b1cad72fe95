"""Per-run context bound into capability closures.

Capabilities never read module-level globals: each agent run builds its tools
from an AgentToolContext, so concurrent workers cannot see each other's
session.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Optional

from agentOrchestrator.events import NullPublisher, Publisher

# Receives an ask_user request payload, resolves to the user's answer.
UserInputProvider = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class AgentToolContext:
    """Everything a capability may need while an agent run is active.

    - store: SessionStore owning the session's tasks
    - session_id / thread_id: which run the tools act on
    - publisher: notification channel (for ask_user and passthrough events)
    - dispatcher: SubAgentDispatcher used by explore/execute
    - model: chat model handed to spawned workers
    - user_input: optional async provider answering ask_user questions
    """

    store: Any
    session_id: Optional[str]
    thread_id: Optional[str] = None
    publisher: Publisher = field(default_factory=NullPublisher)
    dispatcher: Any = None
    model: Any = None
    user_input: Optional[UserInputProvider] = None

    def session(self):
        if not self.session_id:
            return None
        return self.store.get_session(self.session_id)

    def for_worker(self) -> "AgentToolContext":
        """Context for a spawned worker: same session, no user access."""
        return replace(self, user_input=None)


NO_SESSION_ERROR = "No active agent session"


__all__ = ["AgentToolContext", "NO_SESSION_ERROR", "UserInputProvider"]
