"""Per-user persisted synchronization state."""

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from chat_sync.domain.models.timestamps import UtcDatetime


class PersistedSyncState(BaseModel):
    """Serialized watermarks and unread counts, keyed by entity key.

    A watermark of ``None`` records an entity seen with an empty history.
    """

    model_config = ConfigDict(frozen=True)

    version: int = 1
    watermarks: dict[str, UtcDatetime | None] = Field(default_factory=dict)
    unread: dict[str, NonNegativeInt] = Field(default_factory=dict)
