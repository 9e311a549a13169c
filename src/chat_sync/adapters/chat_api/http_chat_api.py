"""HTTP client for the chat server's polling endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from chat_sync.adapters.chat_api.api_request_logger import log_api_request
from chat_sync.domain.models.chat import (
    ChannelMessagePage,
    DirectConversationSummary,
    DirectMessagePage,
    PageRequest,
    ServerSummary,
)
from chat_sync.domain.models.errors import ChatApiError
from chat_sync.domain.models.moderation import ModerationCommand
from chat_sync.domain.models.presence import PresenceSnapshot

if TYPE_CHECKING:
    from chat_sync.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)


def _page_params(page: PageRequest) -> dict[str, str | int]:
    params: dict[str, str | int] = {"limit": page.limit}
    if page.before_created_at is not None:
        params["beforeCreatedAt"] = page.before_created_at.isoformat()
    if page.before_id is not None:
        params["beforeId"] = page.before_id
    return params


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpChatApi:
    """Chat server client over a shared aiohttp session.

    Authenticates with the session cookie configured in AppConfig. Any transport
    error, non-2xx status or unexpected payload is raised as ChatApiError.
    """

    def __init__(self, session: aiohttp.ClientSession, config: AppConfig) -> None:
        """Initialize with an aiohttp session and the application config."""
        self._session = session
        self._base_url = config.api_base_url
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if config.session_token:
            self._headers["Cookie"] = f"{config.auth_cookie_name}={config.session_token}"
        self._timeout = (
            aiohttp.ClientTimeout(total=config.request_timeout_seconds)
            if config.request_timeout_seconds is not None
            else None
        )

    async def list_servers(self, user_id: str) -> list[ServerSummary]:
        data = await self._get_json("/api/servers", {"userId": user_id})
        return self._parse_list(data, "servers", ServerSummary)

    async def list_channel_messages_page(
        self, server_id: str, channel_id: str, page: PageRequest
    ) -> ChannelMessagePage:
        path = f"/api/servers/{_segment(server_id)}/channels/{_segment(channel_id)}/messages"
        data = await self._get_json(path, _page_params(page))
        return self._parse_model(data, ChannelMessagePage)

    async def list_direct_conversations(self, user_id: str) -> list[DirectConversationSummary]:
        data = await self._get_json("/api/direct/conversations", {"userId": user_id})
        return self._parse_list(data, "conversations", DirectConversationSummary)

    async def list_direct_messages_page(
        self, conversation_id: str, page: PageRequest
    ) -> DirectMessagePage:
        params = {"conversationId": conversation_id, **_page_params(page)}
        data = await self._get_json("/api/direct/messages", params)
        return self._parse_model(data, DirectMessagePage)

    async def get_voice_presence(self, server_id: str) -> dict[str, PresenceSnapshot]:
        """Get voice rosters keyed by channel id.

        The server answers ``{"channels": {channelId: [member, ...]}}``.
        """
        data = await self._get_json(f"/api/servers/{_segment(server_id)}/voice-presence")
        channels = data.get("channels") if isinstance(data, dict) else None
        if not isinstance(channels, dict):
            raise ChatApiError("Voice presence response has no 'channels' object")
        try:
            return {
                channel_id: PresenceSnapshot(channel_id=channel_id, members=members)
                for channel_id, members in channels.items()
            }
        except ValidationError as e:
            raise ChatApiError(f"Invalid voice presence payload: {e}") from e

    async def get_next_moderation_command(
        self, server_id: str, user_id: str
    ) -> ModerationCommand | None:
        data = await self._get_json(
            f"/api/servers/{_segment(server_id)}/voice-actions/next", {"userId": user_id}
        )
        if not isinstance(data, dict):
            raise ChatApiError("Voice action response is not an object")
        action = data.get("action")
        if action is None:
            return None
        return self._parse_model(action, ModerationCommand)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        log_api_request("GET", url, params=params, headers=self._headers)
        try:
            async with self._session.get(
                url, params=params, headers=self._headers, timeout=self._timeout
            ) as response:
                if response.status != 200:
                    await self._raise_for_response(response, url)
                return await response.json(content_type=None)
        except ChatApiError:
            raise
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            raise ChatApiError(f"Request to {url} failed: {e}") from e

    async def _raise_for_response(self, response: aiohttp.ClientResponse, url: str) -> None:
        error_text = await response.text()
        message = error_text[:200] if error_text else "(empty response body)"
        try:
            payload = await response.json(content_type=None)
            if isinstance(payload, dict) and isinstance(payload.get("error"), str):
                message = payload["error"]
        except ValueError:
            pass
        raise ChatApiError(
            f"Chat server returned status {response.status} for {url}: {message}",
            status_code=response.status,
        )

    @staticmethod
    def _parse_model(data: Any, model: type[Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ChatApiError(f"Invalid {model.__name__} payload: {e}") from e

    @classmethod
    def _parse_list(cls, data: Any, key: str, model: type[Any]) -> list[Any]:
        items = data.get(key) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ChatApiError(f"Response has no '{key}' list")
        return [cls._parse_model(item, model) for item in items]
