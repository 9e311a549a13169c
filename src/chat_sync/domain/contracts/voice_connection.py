"""Protocol for the voice connection owned by the media layer."""

from typing import Protocol


class VoiceConnectionProtocol(Protocol):
    """The local user's voice session."""

    @property
    def current_server_id(self) -> str | None:
        """Server of the connected voice channel, or None if not connected."""
        ...

    @property
    def current_channel_id(self) -> str | None:
        """Connected voice channel, or None if not connected."""
        ...

    async def connect(self, server_id: str, channel_id: str) -> None:
        """Connect to a voice channel, leaving the current one first."""
        ...

    async def disconnect(self) -> None:
        """Leave the current voice channel."""
        ...
