"""Domain contracts (protocols) for external collaborators."""

from chat_sync.domain.contracts.chat_api import ChatApiProtocol
from chat_sync.domain.contracts.event_publisher import EventPublisherProtocol
from chat_sync.domain.contracts.notice_sink import NoticeSinkProtocol
from chat_sync.domain.contracts.poll_loop import PollLoopProtocol
from chat_sync.domain.contracts.sound_player import SoundPlayerProtocol
from chat_sync.domain.contracts.state_store import SyncStateStoreProtocol
from chat_sync.domain.contracts.voice_connection import VoiceConnectionProtocol

__all__ = [
    "ChatApiProtocol",
    "EventPublisherProtocol",
    "NoticeSinkProtocol",
    "PollLoopProtocol",
    "SoundPlayerProtocol",
    "SyncStateStoreProtocol",
    "VoiceConnectionProtocol",
]
