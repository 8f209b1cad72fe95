"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from agentOrchestrator.config.settings import (  # noqa: E402
    ContextSettings,
    ModelRoutingSettings,
    ObservabilitySettings,
    OrchestrationSettings,
    Settings,
)
from agentOrchestrator.events import ThreadBroadcaster  # noqa: E402
from agentOrchestrator.sessions import SessionStore  # noqa: E402
from tests.support.scripted_model import ScriptedChatModel  # noqa: E402


class RecordingPublisher:
    """Publisher that keeps every event in order."""

    def __init__(self):
        self.events = []

    def publish(self, thread_id, event):
        self.events.append(event)

    def types(self):
        return [e.type.value for e in self.events]

    def of_type(self, event_type):
        return [e for e in self.events if e.type.value == event_type]


@pytest.fixture
def settings():
    """Settings independent of the developer's .env file."""
    return Settings(
        models=ModelRoutingSettings(model_id="gpt-4o", provider="openai", api_key="test-key", context_window=128000),
        orchestration=OrchestrationSettings(
            plan_max_steps=15,
            execute_max_steps=30,
            explore_max_steps=10,
            sub_executor_max_steps=20,
        ),
        context=ContextSettings(),
        observability=ObservabilitySettings(),
    )


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def store(publisher):
    return SessionStore(publisher=publisher)


@pytest.fixture
def broadcaster():
    return ThreadBroadcaster()


@pytest.fixture
def scripted_model():
    """Factory: scripted_model(responses=[...]) or scripted_model(responder=fn)."""
    def factory(responses=None, responder=None, latency=None):
        return ScriptedChatModel(responses=list(responses or []), responder=responder, latency=latency)
    return factory
