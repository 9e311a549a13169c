"""Voice presence domain models."""

from dataclasses import dataclass

from pydantic import Field, field_validator

from chat_sync.domain.models.chat import WireModel
from chat_sync.domain.models.user_id import normalize_presence_identity


class PresenceMember(WireModel):
    """A participant of a voice channel."""

    user_id: str
    user_name: str = ""
    mic_enabled: bool = False
    camera_enabled: bool = False

    @field_validator("user_id")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_presence_identity(v)


class PresenceSnapshot(WireModel):
    """Roster of one voice channel, replaced wholesale each poll tick."""

    channel_id: str
    members: list[PresenceMember] = Field(default_factory=list)

    @field_validator("members")
    @classmethod
    def dedupe(cls, v: list[PresenceMember]) -> list[PresenceMember]:
        """Keep the first entry per user (one user may join from several devices)."""
        seen: set[str] = set()
        unique: list[PresenceMember] = []
        for member in v:
            if not member.user_id or member.user_id in seen:
                continue
            seen.add(member.user_id)
            unique.append(member)
        return unique

    def member_ids(self) -> frozenset[str]:
        return frozenset(m.user_id for m in self.members)

    def find(self, user_id: str) -> PresenceMember | None:
        return next((m for m in self.members if m.user_id == user_id), None)


@dataclass(frozen=True)
class PresenceDiff:
    """Users that joined or left a voice channel between two snapshots."""

    channel_id: str
    joined: tuple[str, ...] = ()
    left: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.joined and not self.left
