"""Protocol for the chat server operations the engine polls."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chat_sync.domain.models.chat import (
        ChannelMessagePage,
        DirectConversationSummary,
        DirectMessagePage,
        PageRequest,
        ServerSummary,
    )
    from chat_sync.domain.models.moderation import ModerationCommand
    from chat_sync.domain.models.presence import PresenceSnapshot


class ChatApiProtocol(Protocol):
    """Request/response operations offered by the chat server.

    Implementations raise ``ChatApiError`` for transport failures and non-2xx
    responses.
    """

    async def list_servers(self, user_id: str) -> list["ServerSummary"]:
        """List the servers the user belongs to, with their latest activity."""
        ...

    async def list_channel_messages_page(
        self, server_id: str, channel_id: str, page: "PageRequest"
    ) -> "ChannelMessagePage":
        """Fetch a page of channel messages (latest page when no cursor is given)."""
        ...

    async def list_direct_conversations(self, user_id: str) -> list["DirectConversationSummary"]:
        """List the user's direct conversations, with their latest activity."""
        ...

    async def list_direct_messages_page(
        self, conversation_id: str, page: "PageRequest"
    ) -> "DirectMessagePage":
        """Fetch a page of direct messages (latest page when no cursor is given)."""
        ...

    async def get_voice_presence(self, server_id: str) -> dict[str, "PresenceSnapshot"]:
        """Get the roster of every voice channel of a server, keyed by channel id."""
        ...

    async def get_next_moderation_command(
        self, server_id: str, user_id: str
    ) -> "ModerationCommand | None":
        """Take the pending moderation command addressed to the user, if any.

        Reading consumes the command on the server.
        """
        ...
