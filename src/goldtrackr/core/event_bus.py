"""
Internal event bus for decoupled communication.

The engine publishes refresh results, alerts and order outcomes here;
the CLI reporter and the dashboard WebSocket subscribe without the
engine knowing about either.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """System event types."""

    # Market data events
    PRICES_UPDATED = "prices_updated"
    NEWS_UPDATED = "news_updated"
    FETCH_FAILED = "fetch_failed"

    # Signal events
    ALERT_RAISED = "alert_raised"
    SUGGESTIONS_UPDATED = "suggestions_updated"

    # Execution events
    ORDER_SUBMITTED = "order_submitted"
    ORDER_FAILED = "order_failed"

    # System events
    SHUTDOWN = "shutdown"


T = TypeVar("T")


@dataclass
class Event(Generic[T]):
    """Generic event with typed payload."""

    type: EventType
    payload: T
    timestamp: int = 0  # epoch ms
    source: str = ""

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = get_timestamp_ms()


# Type alias for event handlers
EventHandler = Callable[[Event[Any]], Awaitable[None]]
SyncEventHandler = Callable[[Event[Any]], None]


class EventBus:
    """
    Async-safe event bus for internal messaging.

    Features:
    - Async and sync handler support
    - Priority-based handler ordering
    - Wildcard subscriptions for forwarders such as the WebSocket hub
    - Error isolation per handler
    """

    def __init__(self) -> None:
        """Initialize event bus."""
        self._handlers: dict[EventType, list[tuple[int, EventHandler]]] = defaultdict(list)
        self._sync_handlers: dict[EventType, list[tuple[int, SyncEventHandler]]] = defaultdict(list)
        self._wildcard: list[EventHandler] = []
        self._paused = False

    def subscribe(
        self,
        event_type: EventType,
        handler: EventHandler,
        priority: int = 0,
    ) -> None:
        """
        Subscribe an async handler to an event type.

        Args:
            event_type: Event type to handle.
            handler: Async handler function.
            priority: Handler priority (higher = earlier execution).
        """
        self._handlers[event_type].append((priority, handler))
        self._handlers[event_type].sort(key=lambda x: x[0], reverse=True)

    def subscribe_sync(
        self,
        event_type: EventType,
        handler: SyncEventHandler,
        priority: int = 0,
    ) -> None:
        """Subscribe a sync handler to an event type."""
        self._sync_handlers[event_type].append((priority, handler))
        self._sync_handlers[event_type].sort(key=lambda x: x[0], reverse=True)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe an async handler to every event type."""
        self._wildcard.append(handler)

    def unsubscribe(
        self,
        event_type: EventType | None,
        handler: EventHandler | SyncEventHandler,
    ) -> bool:
        """
        Unsubscribe a handler.

        Args:
            event_type: Event type, or None for a wildcard handler.
            handler: Handler to remove.

        Returns:
            True if handler was found and removed.
        """
        if event_type is None:
            for i, wh in enumerate(self._wildcard):
                if wh is handler:
                    self._wildcard.pop(i)
                    return True
            return False

        for i, (_, ah) in enumerate(self._handlers[event_type]):
            if ah is handler:
                self._handlers[event_type].pop(i)
                return True

        for i, (_, sh) in enumerate(self._sync_handlers[event_type]):
            if sh is handler:
                self._sync_handlers[event_type].pop(i)
                return True

        return False

    async def publish(self, event: Event[Any]) -> None:
        """
        Publish an event to all subscribers.

        A failing handler is logged and does not stop delivery to the rest.

        Args:
            event: Event to publish.
        """
        if self._paused:
            return

        for _, sync_handler in self._sync_handlers[event.type]:
            try:
                sync_handler(event)
            except Exception as e:
                logger.error(f"Sync handler error for {event.type.value}: {e}")

        for _, async_handler in self._handlers[event.type]:
            try:
                await async_handler(event)
            except Exception as e:
                logger.error(f"Async handler error for {event.type.value}: {e}")

        for wildcard_handler in list(self._wildcard):
            try:
                await wildcard_handler(event)
            except Exception as e:
                logger.error(f"Wildcard handler error for {event.type.value}: {e}")

    def pause(self) -> None:
        """Pause event delivery."""
        self._paused = True

    def resume(self) -> None:
        """Resume event delivery."""
        self._paused = False

    def clear(self, event_type: EventType | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: Specific type to clear, or None for all.
        """
        if event_type:
            self._handlers[event_type].clear()
            self._sync_handlers[event_type].clear()
        else:
            self._handlers.clear()
            self._sync_handlers.clear()
            self._wildcard.clear()

    def handler_count(self, event_type: EventType) -> int:
        """Get number of handlers for an event type, wildcards included."""
        return (
            len(self._handlers[event_type])
            + len(self._sync_handlers[event_type])
            + len(self._wildcard)
        )

    @property
    def is_paused(self) -> bool:
        """Check if event bus is paused."""
        return self._paused
