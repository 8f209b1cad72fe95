"""Notification channel: event types and publishers."""

from .publisher import (
    CompositePublisher,
    LoggingPublisher,
    NullPublisher,
    Publisher,
    Subscription,
    ThreadBroadcaster,
)
from .types import EventType, OrchestrationEvent

__all__ = [
    "CompositePublisher",
    "EventType",
    "LoggingPublisher",
    "NullPublisher",
    "OrchestrationEvent",
    "Publisher",
    "Subscription",
    "ThreadBroadcaster",
]
