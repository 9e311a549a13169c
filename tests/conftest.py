"""Shared fixtures for the chat sync tests."""

import pytest
from fakes import FakeChatApi, RecordingNoticeSink, RecordingSoundPlayer

from chat_sync.adapters.broadcasters import EventBroadcaster
from chat_sync.application.services import EnginePublishers


@pytest.fixture
def chat_api() -> FakeChatApi:
    return FakeChatApi()


@pytest.fixture
def sound_player() -> RecordingSoundPlayer:
    return RecordingSoundPlayer()


@pytest.fixture
def notices() -> RecordingNoticeSink:
    return RecordingNoticeSink()


@pytest.fixture
def publishers() -> EnginePublishers:
    return EnginePublishers(
        notifications=EventBroadcaster("notifications"),
        voice_joins=EventBroadcaster("voice_joins"),
        voice_leaves=EventBroadcaster("voice_leaves"),
        message_pages=EventBroadcaster("message_pages"),
    )
