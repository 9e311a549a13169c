"""Tracked entity domain model."""

from dataclasses import dataclass
from enum import StrEnum


class EntityKind(StrEnum):
    """Kinds of conversation state the engine keeps watermarks for."""

    CHANNEL = "channel"
    DIRECT_CONVERSATION = "direct"
    SERVER = "server"


@dataclass(frozen=True)
class TrackedEntity:
    """A trackable unit of conversation state, identified by (kind, id)."""

    kind: EntityKind
    id: str

    @property
    def key(self) -> str:
        """Stable string key used for persistence and logging."""
        return f"{self.kind.value}:{self.id}"

    @classmethod
    def from_key(cls, key: str) -> "TrackedEntity":
        """Parse a key produced by `key` back into an entity.

        Raises:
            ValueError: If the key has no kind prefix or an unknown kind.
        """
        kind, sep, entity_id = key.partition(":")
        if not sep or not entity_id:
            raise ValueError(f"Malformed entity key: {key!r}")
        return cls(EntityKind(kind), entity_id)

    @classmethod
    def channel(cls, channel_id: str) -> "TrackedEntity":
        return cls(EntityKind.CHANNEL, channel_id)

    @classmethod
    def direct_conversation(cls, conversation_id: str) -> "TrackedEntity":
        return cls(EntityKind.DIRECT_CONVERSATION, conversation_id)

    @classmethod
    def server(cls, server_id: str) -> "TrackedEntity":
        return cls(EntityKind.SERVER, server_id)

    def __str__(self) -> str:
        return self.key
