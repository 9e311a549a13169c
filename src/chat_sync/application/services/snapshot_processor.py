"""Snapshot processor: turns poll responses into watermark, unread and event updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from chat_sync.domain.models.chat import DirectMessage
from chat_sync.domain.models.events import (
    MessagePageEvent,
    NotificationCandidate,
    NotificationEvent,
    SoundKind,
    VoiceJoinEvent,
    VoiceLeaveEvent,
)
from chat_sync.domain.models.tracked_entity import TrackedEntity

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from chat_sync.application.services.notification_policy import NotificationPolicy
    from chat_sync.application.services.sync_state import SyncState
    from chat_sync.domain.contracts.event_publisher import EventPublisherProtocol
    from chat_sync.domain.contracts.sound_player import SoundPlayerProtocol
    from chat_sync.domain.contracts.voice_connection import VoiceConnectionProtocol
    from chat_sync.domain.models.chat import (
        ChannelMessage,
        ChannelMessagePage,
        DirectConversationSummary,
        DirectMessagePage,
        ServerSummary,
    )
    from chat_sync.domain.models.presence import PresenceSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnginePublishers:
    """Event streams exposed to the UI layer."""

    notifications: EventPublisherProtocol[NotificationEvent]
    voice_joins: EventPublisherProtocol[VoiceJoinEvent]
    voice_leaves: EventPublisherProtocol[VoiceLeaveEvent]
    message_pages: EventPublisherProtocol[MessagePageEvent]


class SnapshotProcessor:
    """Applies poll snapshots to the state of the logged-in user.

    Every new message goes through the same path: the watermark store decides
    whether it is new, the unread ledger whether it counts, and the notification
    policy whether it is audible. At most one message sound is played per snapshot
    and entity group.
    """

    def __init__(
        self,
        state: SyncState,
        policy: NotificationPolicy,
        sound_player: SoundPlayerProtocol,
        voice: VoiceConnectionProtocol,
        publishers: EnginePublishers,
    ) -> None:
        self._state = state
        self._policy = policy
        self._sound_player = sound_player
        self._voice = voice
        self._publishers = publishers
        # Servers where the user's membership has notification sounds turned off.
        self._silenced_servers: set[str] = set()
        self._channel_servers: dict[str, str] = {}

    def process_servers(self, servers: Sequence[ServerSummary]) -> None:
        """Account for the latest activity of every server and its text channels."""
        user_id = self._state.user_id
        for server in servers:
            server_entity = TrackedEntity.server(server.id)
            member = server.member(user_id)
            if member is not None and not member.notify_sound_enabled:
                self._silenced_servers.add(server.id)
            else:
                self._silenced_servers.discard(server.id)

            channel_sounded = False
            for channel in server.text_channels:
                self._channel_servers[channel.id] = server.id
                channel_entity = TrackedEntity.channel(channel.id)
                sounded = self._account(
                    channel_entity,
                    channel.last_message_at,
                    channel.last_message_user_id,
                    muted=self._server_muted(server.id, channel_entity),
                    allow_sound=not channel_sounded,
                )
                channel_sounded = channel_sounded or sounded

            # The channel entry already announced the same message.
            self._account(
                server_entity,
                server.last_message_at,
                server.last_message_user_id,
                muted=self._server_muted(server.id),
                allow_sound=not channel_sounded,
            )

    def process_direct_conversations(
        self, conversations: Sequence[DirectConversationSummary]
    ) -> None:
        """Account for the latest activity of every direct conversation."""
        sounded = False
        for conversation in conversations:
            entity = TrackedEntity.direct_conversation(conversation.id)
            sounded = (
                self._account(
                    entity,
                    conversation.last_message_at,
                    conversation.last_author_id,
                    muted=self._policy.is_muted(entity),
                    allow_sound=not sounded,
                    preview=conversation.last_message_preview or None,
                )
                or sounded
            )

    def process_channel_page(
        self, server_id: str, channel_id: str, page: ChannelMessagePage
    ) -> None:
        """Account for the latest page of the channel on screen and publish it."""
        entity = TrackedEntity.channel(channel_id)
        self._account_page(entity, page.messages, muted=self._server_muted(server_id, entity))
        self._publishers.message_pages.publish(
            MessagePageEvent(entity=entity, messages=tuple(page.messages), has_more=page.has_more)
        )

    def process_direct_page(self, conversation_id: str, page: DirectMessagePage) -> None:
        """Account for the latest page of the conversation on screen and publish it."""
        entity = TrackedEntity.direct_conversation(conversation_id)
        self._account_page(entity, page.messages, muted=self._policy.is_muted(entity))
        self._publishers.message_pages.publish(
            MessagePageEvent(entity=entity, messages=tuple(page.messages), has_more=page.has_more)
        )

    def process_voice_presence(
        self, server_id: str, snapshots: Mapping[str, PresenceSnapshot]
    ) -> None:
        """Diff the voice rosters of a server and publish joins and leaves."""
        user_id = self._state.user_id
        local_channel_id = (
            self._voice.current_channel_id if self._voice.current_server_id == server_id else None
        )
        for presence_diff in self._state.presence.apply(snapshots):
            snapshot = snapshots[presence_diff.channel_id]
            for joined_user_id in presence_diff.joined:
                if joined_user_id == user_id:
                    logger.debug(f"Own join into voice channel {presence_diff.channel_id}")
                    continue
                sound = self._policy.should_play_voice_join(
                    joined_user_id, user_id, presence_diff.channel_id, local_channel_id
                )
                if sound:
                    self._sound_player.play_sound(SoundKind.VOICE_JOIN)
                member = snapshot.find(joined_user_id)
                self._publishers.voice_joins.publish(
                    VoiceJoinEvent(
                        server_id=server_id,
                        channel_id=presence_diff.channel_id,
                        user_id=joined_user_id,
                        user_name=member.user_name if member is not None else "",
                        sound_requested=sound,
                    )
                )
            for left_user_id in presence_diff.left:
                self._publishers.voice_leaves.publish(
                    VoiceLeaveEvent(
                        server_id=server_id,
                        channel_id=presence_diff.channel_id,
                        user_id=left_user_id,
                    )
                )

    def server_of_channel(self, channel_id: str) -> str | None:
        """Server a channel belongs to, as of the latest servers snapshot."""
        return self._channel_servers.get(channel_id)

    def acknowledge_own_message(self, entity: TrackedEntity, created_at: datetime) -> None:
        """Raise a watermark past a message the local user just sent."""
        if self._state.watermarks.raise_to(entity, created_at):
            logger.debug(f"Acknowledged own message in {entity} at {created_at}")

    def _server_muted(self, server_id: str, *entities: TrackedEntity) -> bool:
        if server_id in self._silenced_servers:
            return True
        return self._policy.is_muted(TrackedEntity.server(server_id), *entities)

    def _account_page(
        self,
        entity: TrackedEntity,
        messages: Sequence[ChannelMessage | DirectMessage],
        *,
        muted: bool,
    ) -> None:
        ordered = sorted(messages, key=lambda m: m.created_at)
        if not ordered:
            self._state.watermarks.observe(entity, None)
            return
        if not self._state.watermarks.is_tracked(entity):
            # A history never seen before is accounted for as a whole.
            self._state.watermarks.observe(entity, ordered[-1].created_at)
            return

        sounded = False
        for message in ordered:
            sounded = (
                self._account(
                    entity,
                    message.created_at,
                    _author_of(message),
                    muted=muted,
                    allow_sound=not sounded,
                    preview=message.content or None,
                )
                or sounded
            )

    def _account(
        self,
        entity: TrackedEntity,
        occurred_at: datetime | None,
        author_id: str | None,
        *,
        muted: bool,
        allow_sound: bool = True,
        preview: str | None = None,
    ) -> bool:
        """Run one candidate message through watermark, ledger and policy.

        Returns:
            True if a message sound was requested.
        """
        result = self._state.watermarks.observe(entity, occurred_at)
        if not result.is_new or occurred_at is None:
            return False

        user_id = self._state.user_id
        author = author_id or ""
        is_focused = self._state.focus.is_focused(entity)
        counted = self._state.unread.on_incoming_message(
            entity, author, user_id, is_focused=is_focused, is_new=True
        )
        if not counted:
            return False

        candidate = NotificationCandidate(
            author_id=author, current_user_id=user_id, is_focused=is_focused, muted=muted
        )
        sound = allow_sound and self._policy.should_notify(candidate)
        if sound:
            self._sound_player.play_sound(SoundKind.MESSAGE)

        self._publishers.notifications.publish(
            NotificationEvent(
                entity=entity,
                author_id=author,
                occurred_at=occurred_at,
                unread_count=self._state.unread.get_count(entity),
                sound_requested=sound,
                preview=preview,
            )
        )
        return sound


def _author_of(message: ChannelMessage | DirectMessage) -> str:
    if isinstance(message, DirectMessage):
        return message.sender_id
    return message.user_id
