"""Tests for HttpChatApi against a local aiohttp server."""

from collections.abc import Awaitable, Callable

import aiohttp
import pytest
from aiohttp import test_utils, web
from fakes import at

from chat_sync.adapters.chat_api import HttpChatApi
from chat_sync.adapters.config import AppConfig
from chat_sync.domain.models import ChatApiError, ModerationCommandType, PageRequest

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


async def _serve(
    routes: dict[str, Handler], **config: object
) -> tuple[test_utils.TestServer, HttpChatApi, aiohttp.ClientSession]:
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    session = aiohttp.ClientSession()
    api = HttpChatApi(
        session,
        AppConfig.for_testing(api_base_url=str(server.make_url("")), **config),
    )
    return server, api, session


@pytest.mark.asyncio
async def test_list_servers_sends_session_cookie() -> None:
    """Given a session token, when listing servers, then the auth cookie and user id are sent."""
    seen: dict[str, str] = {}

    async def servers(request: web.Request) -> web.Response:
        seen["cookie"] = request.cookies.get("twinslkit_auth", "")
        seen["user"] = request.query.get("userId", "")
        return web.json_response(
            {
                "servers": [
                    {
                        "id": "s1",
                        "name": "Friends",
                        "lastMessageAt": at(1).isoformat(),
                        "lastMessageUserId": "Bob",
                        "members": [{"userId": "alice", "notifySoundEnabled": False}],
                        "channels": [{"id": "a", "type": "text"}, {"id": "v", "type": "voice"}],
                    }
                ]
            }
        )

    server, api, session = await _serve({"/api/servers": servers}, session_token="tok")
    try:
        result = await api.list_servers("alice")
    finally:
        await session.close()
        await server.close()

    assert seen == {"cookie": "tok", "user": "alice"}
    assert result[0].last_message_at == at(1)
    assert result[0].last_message_user_id == "bob"
    assert [c.id for c in result[0].text_channels] == ["a"]
    member = result[0].member("ALICE")
    assert member is not None and member.notify_sound_enabled is False


@pytest.mark.asyncio
async def test_channel_page_passes_cursor() -> None:
    seen: dict[str, str] = {}

    async def messages(request: web.Request) -> web.Response:
        seen.update(request.query)
        return web.json_response(
            {
                "messages": [
                    {
                        "id": "m1",
                        "serverId": "s1",
                        "channelId": "a",
                        "userId": "bob",
                        "content": "hi",
                        "createdAt": at(1).isoformat(),
                    }
                ],
                "hasMore": True,
            }
        )

    server, api, session = await _serve({"/api/servers/s1/channels/a/messages": messages})
    try:
        page = await api.list_channel_messages_page(
            "s1", "a", PageRequest(limit=10, before_created_at=at(5), before_id="m9")
        )
    finally:
        await session.close()
        await server.close()

    assert seen["limit"] == "10"
    assert seen["beforeId"] == "m9"
    assert "beforeCreatedAt" in seen
    assert page.has_more is True
    assert page.messages[0].content == "hi"


@pytest.mark.asyncio
async def test_voice_presence_parses_channels() -> None:
    async def presence(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "channels": {
                    "v1": [
                        {"userId": "Bob::phone", "userName": "Bob", "micEnabled": True},
                        {"userId": "bob::laptop", "userName": "Bob"},
                    ],
                    "v2": [],
                }
            }
        )

    server, api, session = await _serve({"/api/servers/s1/voice-presence": presence})
    try:
        snapshots = await api.get_voice_presence("s1")
    finally:
        await session.close()
        await server.close()

    assert set(snapshots) == {"v1", "v2"}
    assert snapshots["v1"].member_ids() == frozenset({"bob"})
    assert snapshots["v2"].members == []


@pytest.mark.asyncio
async def test_next_moderation_command() -> None:
    actions = [
        {"action": {"id": "k1", "type": "kick", "targetUserId": "alice", "reason": "spam"}},
        {"action": None},
    ]

    async def next_action(request: web.Request) -> web.Response:
        return web.json_response(actions.pop(0))

    server, api, session = await _serve({"/api/servers/s1/voice-actions/next": next_action})
    try:
        first = await api.get_next_moderation_command("s1", "alice")
        second = await api.get_next_moderation_command("s1", "alice")
    finally:
        await session.close()
        await server.close()

    assert first is not None
    assert first.type == ModerationCommandType.KICK
    assert first.reason == "spam"
    assert second is None


@pytest.mark.asyncio
async def test_error_status_raises_chat_api_error() -> None:
    """Given the server answers 401, when polling, then ChatApiError carries the status."""

    async def unauthorized(request: web.Request) -> web.Response:
        return web.json_response({"error": "Session expired"}, status=401)

    server, api, session = await _serve({"/api/direct/conversations": unauthorized})
    try:
        with pytest.raises(ChatApiError) as exc_info:
            await api.list_direct_conversations("alice")
    finally:
        await session.close()
        await server.close()

    assert exc_info.value.status_code == 401
    assert exc_info.value.details.reason == "Session expired"
    assert "Session expired" in str(exc_info.value)


@pytest.mark.asyncio
async def test_malformed_payload_raises_chat_api_error() -> None:
    async def broken(request: web.Request) -> web.Response:
        return web.json_response({"conversations": [{"id": "d1"}]})

    server, api, session = await _serve({"/api/direct/conversations": broken})
    try:
        with pytest.raises(ChatApiError, match="Invalid DirectConversationSummary"):
            await api.list_direct_conversations("alice")
    finally:
        await session.close()
        await server.close()


@pytest.mark.asyncio
async def test_transport_error_raises_chat_api_error() -> None:
    async with aiohttp.ClientSession() as session:
        api = HttpChatApi(session, AppConfig.for_testing(api_base_url="http://127.0.0.1:9"))

        with pytest.raises(ChatApiError) as exc_info:
            await api.list_servers("alice")

    assert exc_info.value.status_code is None
    assert exc_info.value.details.reason == "Transport error"
