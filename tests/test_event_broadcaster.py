"""Tests for EventBroadcaster."""

import logging

import pytest

from chat_sync.adapters.broadcasters import EventBroadcaster


def test_publish_reaches_subscribers_in_order() -> None:
    broadcaster: EventBroadcaster[str] = EventBroadcaster("test")
    received: list[str] = []
    broadcaster.subscribe(lambda event: received.append(f"first:{event}"))
    broadcaster.subscribe(lambda event: received.append(f"second:{event}"))

    broadcaster.publish("e1")

    assert received == ["first:e1", "second:e1"]


def test_unsubscribe_is_idempotent() -> None:
    broadcaster: EventBroadcaster[str] = EventBroadcaster("test")
    received: list[str] = []
    unsubscribe = broadcaster.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    broadcaster.publish("e1")

    assert received == []
    assert broadcaster.subscriber_count == 0


def test_failing_subscriber_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    """Given a subscriber that raises, when publishing, then the error is logged and delivery continues."""
    broadcaster: EventBroadcaster[str] = EventBroadcaster("notifications")
    received: list[str] = []

    def broken(event: str) -> None:
        raise RuntimeError("ui gone")

    broadcaster.subscribe(broken)
    broadcaster.subscribe(received.append)

    with caplog.at_level(logging.ERROR):
        broadcaster.publish("e1")

    assert received == ["e1"]
    assert "Subscriber of notifications failed: ui gone" in caplog.text
