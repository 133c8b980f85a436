"""
Event system for polycode.

Components never call the UI directly. The history cache, the orchestrator
and the workspace publish events ("history.changed", "notice.error", ...)
and whatever renders the state subscribes to the ones it cares about.
"""

from __future__ import annotations

import fnmatch
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

# Handlers may return nothing; they do not cascade further events
EventHandler = Callable[["Event"], Awaitable[None]]


# Event types
HISTORY_CHANGED = "history.changed"
CONVERSION_COMPLETED = "conversion.completed"
CONVERSION_FAILED = "conversion.failed"
EXPLAIN_COMPLETED = "explain.completed"
LANGUAGE_DETECTED = "language.detected"
THEME_CHANGED = "theme.changed"
BUSY_CHANGED = "busy.changed"
NOTICE_SUCCESS = "notice.success"
NOTICE_ERROR = "notice.error"


@dataclass
class Event:
    """
    An event in the system.

    Events are immutable records of something that happened.
    """

    event_type: str  # e.g., "history.changed", "notice.error"
    payload: dict[str, Any] = field(default_factory=dict)

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Subscription:
    """A subscription to events matching a pattern."""

    pattern: str  # e.g., "notice.*" or "history.changed"
    handler: EventHandler

    def matches(self, event: Event) -> bool:
        return fnmatch.fnmatch(event.event_type, self.pattern)


class EventBus:
    """
    In-memory event bus.

    Handlers run in subscription order on the publishing task. A failing
    handler is logged and does not stop the others.
    """

    def __init__(self, max_history: int = 1000):
        self._subscriptions: list[Subscription] = []
        self._event_history: list[Event] = []
        self._max_history = max_history

    def subscribe(self, pattern: str, handler: EventHandler) -> Subscription:
        """
        Subscribe to events matching a pattern.

        Args:
            pattern: Event type pattern (supports wildcards like "notice.*")
            handler: Async function to handle matching events

        Returns:
            The subscription object
        """
        subscription = Subscription(pattern=pattern, handler=handler)
        self._subscriptions.append(subscription)
        return subscription

    async def publish(self, event: Event) -> None:
        """Record an event and dispatch it to every matching handler."""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        for subscription in [s for s in self._subscriptions if s.matches(event)]:
            try:
                await subscription.handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.event_type}")

    async def emit(self, event_type: str, **payload: Any) -> Event:
        """Build and publish an event in one step."""
        event = Event(event_type=event_type, payload=payload)
        await self.publish(event)
        return event

    def get_history(self, event_type: str | None = None, limit: int = 100) -> list[Event]:
        """Query event history, optionally filtered by type pattern."""
        results = self._event_history

        if event_type:
            results = [e for e in results if fnmatch.fnmatch(e.event_type, event_type)]

        return results[-limit:]

