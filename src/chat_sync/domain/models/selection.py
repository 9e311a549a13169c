"""Navigation selection domain model."""

from dataclasses import dataclass

from chat_sync.domain.models.tracked_entity import TrackedEntity


@dataclass(frozen=True)
class Selection:
    """What the user is currently looking at.

    A channel selection always carries its server. A direct conversation is viewed
    outside of any server.
    """

    server_id: str | None = None
    channel_id: str | None = None
    conversation_id: str | None = None

    @property
    def focused_entity(self) -> TrackedEntity | None:
        """The channel or conversation on screen, if any."""
        if self.channel_id is not None:
            return TrackedEntity.channel(self.channel_id)
        if self.conversation_id is not None:
            return TrackedEntity.direct_conversation(self.conversation_id)
        return None

    @property
    def server_entity(self) -> TrackedEntity | None:
        if self.server_id is None:
            return None
        return TrackedEntity.server(self.server_id)
