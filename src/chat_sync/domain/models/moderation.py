"""Moderation command domain models."""

from enum import StrEnum

from pydantic import field_validator

from chat_sync.domain.models.chat import WireModel
from chat_sync.domain.models.user_id import normalize_user_id


class ModerationCommandType(StrEnum):
    """Commands a moderator can address to a user's voice session."""

    KICK = "kick"
    MOVE = "move"


class ModerationCommand(WireModel):
    """A pending moderation command taken from the user's mailbox.

    ``server_id`` is filled in by the client with the server whose mailbox the
    command was read from.
    """

    id: str | None = None
    type: ModerationCommandType
    target_user_id: str | None = None
    target_channel_id: str | None = None
    reason: str | None = None
    server_id: str | None = None

    @field_validator("target_user_id")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_user_id(v) or None

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class ConsumerState(StrEnum):
    """States of the moderation command consumer."""

    IDLE = "idle"
    POLLING = "polling"
    COMMAND_FOUND = "command_found"
    APPLYING = "applying"


class ModerationOutcome(StrEnum):
    """Result of one moderation consumer tick."""

    NO_COMMAND = "no_command"
    APPLIED = "applied"
    NOT_APPLICABLE = "not_applicable"
    DUPLICATE = "duplicate"
    APPLY_FAILED = "apply_failed"
