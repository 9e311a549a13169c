"""Protocol for publishing engine events to subscribers."""

from collections.abc import Callable
from typing import Protocol, TypeVar

EventT = TypeVar("EventT")


class EventPublisherProtocol(Protocol[EventT]):
    """Fan-out of events to synchronous subscriber callbacks."""

    def publish(self, event: EventT) -> None:
        """Deliver an event to every subscriber."""
        ...

    def subscribe(self, callback: Callable[[EventT], None]) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription.
        """
        ...
