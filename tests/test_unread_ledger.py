"""Tests for UnreadLedger."""

import pytest

from chat_sync.application.services import UnreadLedger
from chat_sync.domain.models import EntityKind, InvariantViolationError, TrackedEntity

CHANNEL = TrackedEntity.channel("c1")
CONVERSATION = TrackedEntity.direct_conversation("d1")


def test_message_from_other_user_increments() -> None:
    """Given an unfocused entity, when another user's new message arrives, then the count grows."""
    ledger = UnreadLedger()

    assert ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=False, is_new=True)
    assert ledger.get_count(CHANNEL) == 1


def test_own_message_never_increments() -> None:
    """Given a message whose author is the current user, when accounted, then nothing changes."""
    ledger = UnreadLedger()

    counted = ledger.on_incoming_message(CHANNEL, " Alice ", "alice", is_focused=False, is_new=True)

    assert counted is False
    assert ledger.get_count(CHANNEL) == 0


@pytest.mark.parametrize(("is_focused", "is_new"), [(True, True), (False, False)])
def test_focused_or_known_message_does_not_increment(is_focused: bool, is_new: bool) -> None:
    ledger = UnreadLedger()

    ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=is_focused, is_new=is_new)

    assert ledger.get_count(CHANNEL) == 0


def test_focus_resets_count() -> None:
    ledger = UnreadLedger()
    ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=False, is_new=True)
    ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=False, is_new=True)

    ledger.on_focus_entity(CHANNEL)

    assert ledger.get_count(CHANNEL) == 0
    assert ledger.snapshot() == {}


def test_total_by_kind() -> None:
    ledger = UnreadLedger()
    ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=False, is_new=True)
    ledger.on_incoming_message(CONVERSATION, "bob", "alice", is_focused=False, is_new=True)
    ledger.on_incoming_message(CONVERSATION, "bob", "alice", is_focused=False, is_new=True)

    assert ledger.total() == 3
    assert ledger.total(EntityKind.DIRECT_CONVERSATION) == 2


def test_restore_rejects_negative_counts() -> None:
    ledger = UnreadLedger()

    with pytest.raises(InvariantViolationError):
        ledger.restore({CHANNEL.key: -1})


def test_restore_replaces_counts() -> None:
    ledger = UnreadLedger()
    ledger.on_incoming_message(CHANNEL, "bob", "alice", is_focused=False, is_new=True)

    ledger.restore({CONVERSATION.key: 4, CHANNEL.key: 0})

    assert ledger.get_count(CHANNEL) == 0
    assert ledger.get_count(CONVERSATION) == 4
