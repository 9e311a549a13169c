"""Broadcaster for engine events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from chat_sync.domain.contracts.event_publisher import EventPublisherProtocol

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT")


class EventBroadcaster(EventPublisherProtocol[EventT]):
    """Delivers events to subscriber callbacks, in subscription order."""

    def __init__(self, name: str) -> None:
        """Initialize the broadcaster.

        Args:
            name: Name of the event stream, used in log messages.
        """
        self.name = name
        self._subscribers: list[Callable[[EventT], None]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[EventT], None]) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription; calling it twice is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: EventT) -> None:
        """Deliver an event to every subscriber.

        A failing subscriber is logged and does not prevent delivery to the others.
        """
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Subscriber of {self.name} failed: {e}", exc_info=True)

    def clear(self) -> None:
        self._subscribers.clear()
