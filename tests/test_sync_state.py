"""Tests for SyncState navigation and persistence."""

from fakes import InMemoryStateStore, at

from chat_sync.application.services import SyncState
from chat_sync.domain.models import PresenceSnapshot, Selection, TrackedEntity

CHANNEL_A = TrackedEntity.channel("a")
SERVER = TrackedEntity.server("s1")


def _count_one(state: SyncState, entity: TrackedEntity) -> None:
    state.unread.on_incoming_message(entity, "bob", state.user_id, is_focused=False, is_new=True)


def test_navigate_resets_focused_entity_and_server() -> None:
    """Given unread counts, when the user opens the channel, then channel and server counts reset."""
    state = SyncState("alice")
    _count_one(state, CHANNEL_A)
    _count_one(state, SERVER)
    _count_one(state, TrackedEntity.channel("b"))

    previous = state.navigate(Selection(server_id="s1", channel_id="a"))

    assert previous == Selection()
    assert state.unread.get_count(CHANNEL_A) == 0
    assert state.unread.get_count(SERVER) == 0
    assert state.unread.get_count(TrackedEntity.channel("b")) == 1
    assert state.focus.is_focused(CHANNEL_A)
    assert state.focus.is_focused(SERVER)


def test_server_change_resets_presence() -> None:
    state = SyncState("alice")
    state.navigate(Selection(server_id="s1"))
    state.presence.apply({"v1": PresenceSnapshot(channel_id="v1", members=[{"userId": "bob"}])})

    state.navigate(Selection(server_id="s1", channel_id="a"))
    assert state.presence.membership("v1") == frozenset({"bob"})

    state.navigate(Selection(server_id="s2"))
    assert state.presence.membership("v1") is None


def test_mutations_are_persisted() -> None:
    store = InMemoryStateStore()
    state = SyncState("Alice", store)

    state.watermarks.observe(CHANNEL_A, at(1))
    _count_one(state, SERVER)

    persisted = store.load("alice")
    assert persisted is not None
    assert persisted.watermarks == {"channel:a": at(1)}
    assert persisted.unread == {"server:s1": 1}


def test_discard_keeps_store_unless_asked() -> None:
    store = InMemoryStateStore()
    state = SyncState("alice", store)
    state.watermarks.observe(CHANNEL_A, at(1))

    state.discard(clear_persisted=False)
    assert store.load("alice") is not None
    assert state.watermarks.snapshot() == {}

    state.discard(clear_persisted=True)
    assert store.load("alice") is None
