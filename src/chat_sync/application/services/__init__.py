"""Synchronization engine services."""

from chat_sync.application.services.focus_context import FocusContext
from chat_sync.application.services.moderation_command_consumer import (
    ModerationCommandConsumer,
)
from chat_sync.application.services.notification_policy import NotificationPolicy, should_notify
from chat_sync.application.services.presence_differ import PresenceDiffer, diff
from chat_sync.application.services.snapshot_processor import EnginePublishers, SnapshotProcessor
from chat_sync.application.services.sync_state import SyncState
from chat_sync.application.services.unread_ledger import UnreadLedger
from chat_sync.application.services.watermark_store import WatermarkStore

__all__ = [
    "EnginePublishers",
    "FocusContext",
    "ModerationCommandConsumer",
    "NotificationPolicy",
    "PresenceDiffer",
    "SnapshotProcessor",
    "SyncState",
    "UnreadLedger",
    "WatermarkStore",
    "diff",
    "should_notify",
]
