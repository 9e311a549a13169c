"""Domain models for the chat synchronization engine."""

from chat_sync.domain.models.chat import (
    ChannelMessage,
    ChannelMessagePage,
    ChannelSummary,
    DirectConversationSummary,
    DirectMessage,
    DirectMessagePage,
    PageRequest,
    ServerMember,
    ServerSummary,
)
from chat_sync.domain.models.error_details import ErrorDetails
from chat_sync.domain.models.errors import ChatApiError, InvariantViolationError
from chat_sync.domain.models.events import (
    MessagePageEvent,
    NotificationCandidate,
    NotificationEvent,
    SelectionChangeEvent,
    SoundKind,
    VoiceJoinEvent,
    VoiceLeaveEvent,
)
from chat_sync.domain.models.moderation import (
    ConsumerState,
    ModerationCommand,
    ModerationCommandType,
    ModerationOutcome,
)
from chat_sync.domain.models.persisted_state import PersistedSyncState
from chat_sync.domain.models.presence import PresenceDiff, PresenceMember, PresenceSnapshot
from chat_sync.domain.models.selection import Selection
from chat_sync.domain.models.timestamps import UtcDatetime, ensure_utc
from chat_sync.domain.models.tracked_entity import EntityKind, TrackedEntity
from chat_sync.domain.models.user_id import normalize_user_id
from chat_sync.domain.models.watermark import ObserveResult

__all__ = [
    "ChannelMessage",
    "ChannelMessagePage",
    "ChannelSummary",
    "ChatApiError",
    "ConsumerState",
    "DirectConversationSummary",
    "DirectMessage",
    "DirectMessagePage",
    "EntityKind",
    "ErrorDetails",
    "InvariantViolationError",
    "MessagePageEvent",
    "ModerationCommand",
    "ModerationCommandType",
    "ModerationOutcome",
    "NotificationCandidate",
    "NotificationEvent",
    "ObserveResult",
    "PageRequest",
    "PersistedSyncState",
    "PresenceDiff",
    "PresenceMember",
    "PresenceSnapshot",
    "Selection",
    "SelectionChangeEvent",
    "ServerMember",
    "ServerSummary",
    "SoundKind",
    "TrackedEntity",
    "UtcDatetime",
    "VoiceJoinEvent",
    "VoiceLeaveEvent",
    "ensure_utc",
    "normalize_user_id",
]
