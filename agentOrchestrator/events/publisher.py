"""Publisher interface and in-process implementations.

The Session Store, the Dispatcher and the Pipeline receive a Publisher at
construction time and never know how events travel. ``ThreadBroadcaster``
fans events out to per-thread asyncio queues (a websocket or SSE bridge can
drain a subscription); ``LoggingPublisher`` writes them to the log.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from .types import OrchestrationEvent

LOGGER = logging.getLogger(__name__)

# Queued by Subscription.close to wake a waiting consumer
_CLOSED = object()


class Publisher(Protocol):
    """Outbound push channel keyed by thread id."""

    def publish(self, thread_id: str, event: OrchestrationEvent) -> None:
        ...


class NullPublisher:
    """Drops every event."""

    def publish(self, thread_id: str, event: OrchestrationEvent) -> None:
        return None


class LoggingPublisher:
    """Writes every event to the log at DEBUG level."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or LOGGER

    def publish(self, thread_id: str, event: OrchestrationEvent) -> None:
        self.logger.debug(
            f"[event:{thread_id}] {json.dumps(event.to_dict(), ensure_ascii=False, default=str)}"
        )


class CompositePublisher:
    """Forwards each event to several publishers in order."""

    def __init__(self, publishers: Iterable[Publisher]):
        self.publishers: List[Publisher] = list(publishers)

    def publish(self, thread_id: str, event: OrchestrationEvent) -> None:
        for publisher in self.publishers:
            publisher.publish(thread_id, event)


class Subscription:
    """A live feed of events for one thread.

    Iterate with ``async for``; call ``close()`` (or use ``async with``) to
    detach from the broadcaster. Closing wakes a consumer blocked waiting for
    the next event and ends its iteration.
    """

    def __init__(self, broadcaster: "ThreadBroadcaster", thread_id: str):
        self._broadcaster = broadcaster
        self.thread_id = thread_id
        self.queue: "asyncio.Queue[Any]" = asyncio.Queue()
        self.closed = False

    def push(self, event: OrchestrationEvent) -> None:
        if not self.closed:
            self.queue.put_nowait(event)

    async def get(self) -> Optional[OrchestrationEvent]:
        """Next event, or None once the subscription is closed."""
        if self.closed and self.queue.empty():
            return None
        item = await self.queue.get()
        if item is _CLOSED:
            return None
        return item

    def drain(self) -> List[OrchestrationEvent]:
        """Return every queued event without waiting."""
        events = []
        while not self.queue.empty():
            item = self.queue.get_nowait()
            if item is not _CLOSED:
                events.append(item)
        return events

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.queue.put_nowait(_CLOSED)
            self._broadcaster._detach(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> OrchestrationEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ThreadBroadcaster:
    """Delivers events to every open subscription of the event's thread.

    Threads with no subscribers drop their events silently.
    """

    def __init__(self):
        self._subscriptions: Dict[str, Set[Subscription]] = {}

    def subscribe(self, thread_id: str) -> Subscription:
        subscription = Subscription(self, thread_id)
        self._subscriptions.setdefault(thread_id, set()).add(subscription)
        LOGGER.info(f"[Broadcaster] Client subscribed to thread: {thread_id}")
        return subscription

    def subscriber_count(self, thread_id: str) -> int:
        return len(self._subscriptions.get(thread_id, ()))

    def publish(self, thread_id: str, event: OrchestrationEvent) -> None:
        for subscription in list(self._subscriptions.get(thread_id, ())):
            subscription.push(event)

    def _detach(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.thread_id)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscriptions[subscription.thread_id]
        LOGGER.info(f"[Broadcaster] Client unsubscribed from thread: {subscription.thread_id}")


__all__ = [
    "Publisher",
    "NullPublisher",
    "LoggingPublisher",
    "CompositePublisher",
    "Subscription",
    "ThreadBroadcaster",
]
