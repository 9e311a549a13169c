"""Chat snapshot domain models (servers, channels, direct conversations, messages).

These mirror the JSON payloads returned by the chat server. Field names are
snake_case in Python and camelCase on the wire.
"""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from chat_sync.domain.models.timestamps import UtcDatetime
from chat_sync.domain.models.user_id import normalize_user_id


class WireModel(BaseModel):
    """Base for immutable models parsed from chat server payloads."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


def _normalize_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return normalize_user_id(value) or None


class ServerMember(WireModel):
    """Membership record of a user in a server."""

    user_id: str
    notify_sound_enabled: bool = True

    @field_validator("user_id")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_user_id(v)


class ChannelSummary(WireModel):
    """Channel entry of a server summary."""

    id: str
    name: str = ""
    type: str = "text"
    last_message_at: UtcDatetime | None = None
    last_message_user_id: str | None = None

    @field_validator("last_message_user_id")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        return _normalize_optional(v)


class ServerSummary(WireModel):
    """One server of the servers list, with its latest activity."""

    id: str
    name: str = ""
    last_message_at: UtcDatetime | None = None
    last_message_user_id: str | None = None
    members: list[ServerMember] = Field(default_factory=list)
    channels: list[ChannelSummary] = Field(default_factory=list)

    @field_validator("last_message_user_id")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        return _normalize_optional(v)

    def member(self, user_id: str) -> ServerMember | None:
        """Find the membership record of a user."""
        normalized = normalize_user_id(user_id)
        return next((m for m in self.members if m.user_id == normalized), None)

    @property
    def text_channels(self) -> list[ChannelSummary]:
        return [c for c in self.channels if c.type == "text"]


class DirectConversationSummary(WireModel):
    """One entry of the direct conversation list."""

    id: str
    other_user_id: str
    other_user_name: str = ""
    last_message_at: UtcDatetime | None = None
    last_message_preview: str = ""
    # Not every server version reports who wrote the last message.
    last_message_user_id: str | None = None

    @field_validator("other_user_id")
    @classmethod
    def normalize_other(cls, v: str) -> str:
        return normalize_user_id(v)

    @field_validator("last_message_user_id")
    @classmethod
    def normalize_author(cls, v: str | None) -> str | None:
        return _normalize_optional(v)

    @property
    def last_author_id(self) -> str:
        """Author of the last message, assuming the other participant when unreported."""
        return self.last_message_user_id or self.other_user_id


class ChannelMessage(WireModel):
    """A message posted in a server channel."""

    id: str
    server_id: str
    channel_id: str
    user_id: str
    user_name: str = ""
    content: str = ""
    created_at: UtcDatetime

    @field_validator("user_id")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_user_id(v)


class DirectMessage(WireModel):
    """A message of a direct conversation."""

    id: str
    conversation_id: str
    sender_id: str
    sender_name: str = ""
    content: str = ""
    created_at: UtcDatetime

    @field_validator("sender_id")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_user_id(v)


class ChannelMessagePage(WireModel):
    """A page of channel messages, oldest first."""

    messages: list[ChannelMessage] = Field(default_factory=list)
    has_more: bool = False


class DirectMessagePage(WireModel):
    """A page of direct messages, oldest first."""

    messages: list[DirectMessage] = Field(default_factory=list)
    has_more: bool = False


@dataclass(frozen=True)
class PageRequest:
    """Cursor for fetching a page of messages older than a given message."""

    limit: int = 30
    before_created_at: datetime | None = None
    before_id: str | None = None
