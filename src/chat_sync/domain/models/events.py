"""Events published by the synchronization engine to the UI layer."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from chat_sync.domain.models.chat import ChannelMessage, DirectMessage
from chat_sync.domain.models.selection import Selection
from chat_sync.domain.models.tracked_entity import TrackedEntity


class SoundKind(StrEnum):
    """Notification sounds the engine can request."""

    MESSAGE = "message"
    VOICE_JOIN = "voice_join"


@dataclass(frozen=True)
class NotificationCandidate:
    """Inputs of the notification decision for one new message."""

    author_id: str
    current_user_id: str
    is_focused: bool
    muted: bool


@dataclass(frozen=True)
class NotificationEvent:
    """A new message from another user arrived for an entity the user is not viewing."""

    entity: TrackedEntity
    author_id: str
    occurred_at: datetime
    unread_count: int
    sound_requested: bool
    preview: str | None = None


@dataclass(frozen=True)
class VoiceJoinEvent:
    """Another user joined a voice channel of the active server."""

    server_id: str
    channel_id: str
    user_id: str
    user_name: str = ""
    sound_requested: bool = False


@dataclass(frozen=True)
class VoiceLeaveEvent:
    """A user left a voice channel of the active server."""

    server_id: str
    channel_id: str
    user_id: str


@dataclass(frozen=True)
class MessagePageEvent:
    """Latest page of the channel or conversation currently on screen."""

    entity: TrackedEntity
    messages: tuple[ChannelMessage | DirectMessage, ...]
    has_more: bool


@dataclass(frozen=True)
class SelectionChangeEvent:
    """The user navigated; loops of the previous selection are already retired."""

    previous: Selection
    current: Selection
