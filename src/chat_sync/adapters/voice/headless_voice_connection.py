"""Voice connection stand-in for clients without a media transport."""

import logging

from chat_sync.domain.contracts.voice_connection import VoiceConnectionProtocol

logger = logging.getLogger(__name__)


class HeadlessVoiceConnection(VoiceConnectionProtocol):
    """Tracks which voice channel the user is in without carrying any media."""

    def __init__(self) -> None:
        self._server_id: str | None = None
        self._channel_id: str | None = None

    @property
    def current_server_id(self) -> str | None:
        return self._server_id

    @property
    def current_channel_id(self) -> str | None:
        return self._channel_id

    async def connect(self, server_id: str, channel_id: str) -> None:
        if self._channel_id is not None:
            await self.disconnect()
        self._server_id = server_id
        self._channel_id = channel_id
        logger.info(f"Joined voice channel {channel_id} of server {server_id}")

    async def disconnect(self) -> None:
        if self._channel_id is None:
            return
        logger.info(f"Left voice channel {self._channel_id}")
        self._server_id = None
        self._channel_id = None
