"""Sync client: wires state, policy and polling loops for one client instance."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from chat_sync.adapters.audio import AudioUnlockGate, TerminalBellPlayer
from chat_sync.adapters.broadcasters import EventBroadcaster
from chat_sync.adapters.notices import LoggingNoticeSink
from chat_sync.adapters.persistence import JsonStateStore
from chat_sync.adapters.pollers import LoopDefinition, LoopName, PollScheduler
from chat_sync.adapters.voice import HeadlessVoiceConnection
from chat_sync.application.services import (
    EnginePublishers,
    ModerationCommandConsumer,
    NotificationPolicy,
    SnapshotProcessor,
    SyncState,
)
from chat_sync.domain.models import (
    EntityKind,
    MessagePageEvent,
    NotificationEvent,
    PageRequest,
    Selection,
    SelectionChangeEvent,
    TrackedEntity,
    VoiceJoinEvent,
    VoiceLeaveEvent,
)

if TYPE_CHECKING:
    from chat_sync.adapters.config import AppConfig
    from chat_sync.domain.contracts import (
        ChatApiProtocol,
        NoticeSinkProtocol,
        SoundPlayerProtocol,
        SyncStateStoreProtocol,
        VoiceConnectionProtocol,
    )
    from chat_sync.domain.models import (
        ChannelMessagePage,
        DirectConversationSummary,
        DirectMessagePage,
        ModerationCommand,
        PresenceSnapshot,
        ServerSummary,
    )

logger = logging.getLogger(__name__)


class SyncClient:
    """Keeps one client instance eventually consistent with the chat server.

    Owns the per-user state (created on login, discarded on logout), the six
    polling loops and the event streams the UI subscribes to. Navigation is
    synchronous: the focus changes and unread counts of what comes on screen
    are reset before any later snapshot is processed, and the loops governed
    by the old selection are retired before the selection-change event fires.
    """

    def __init__(
        self,
        config: AppConfig,
        chat_api: ChatApiProtocol,
        *,
        state_store: SyncStateStoreProtocol | None = None,
        sound_player: SoundPlayerProtocol | None = None,
        voice: VoiceConnectionProtocol | None = None,
        notices: NoticeSinkProtocol | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Application configuration.
            chat_api: Chat server client.
            state_store: Durable per-user storage; defaults to JSON files in
                ``config.state_dir``.
            sound_player: Plays notification sounds once audio is unlocked.
            voice: The local voice session.
            notices: Sink for user-visible notices.
        """
        self.config = config
        self._chat_api = chat_api
        self._state_store = (
            state_store if state_store is not None else JsonStateStore(config.state_dir)
        )
        self.audio = AudioUnlockGate(sound_player or TerminalBellPlayer())
        self.voice = voice or HeadlessVoiceConnection()
        self.policy = NotificationPolicy(
            chat_sound_enabled=config.chat_notification_sound_enabled,
            voice_join_sound_enabled=config.voice_join_sound_enabled,
        )

        self.notifications: EventBroadcaster[NotificationEvent] = EventBroadcaster("notifications")
        self.voice_joins: EventBroadcaster[VoiceJoinEvent] = EventBroadcaster("voice_joins")
        self.voice_leaves: EventBroadcaster[VoiceLeaveEvent] = EventBroadcaster("voice_leaves")
        self.message_pages: EventBroadcaster[MessagePageEvent] = EventBroadcaster("message_pages")
        self.selection_changes: EventBroadcaster[SelectionChangeEvent] = EventBroadcaster(
            "selection_changes"
        )

        self._consumer = ModerationCommandConsumer(
            chat_api,
            self.voice,
            notices or LoggingNoticeSink(),
            switch_channel=self.switch_voice_channel,
            disconnect=self.leave_voice,
        )
        self._state: SyncState | None = None
        self._processor: SnapshotProcessor | None = None
        self._scheduler: PollScheduler | None = None

    @property
    def is_logged_in(self) -> bool:
        return self._state is not None

    @property
    def user_id(self) -> str | None:
        return self._state.user_id if self._state is not None else None

    @property
    def selection(self) -> Selection:
        return self._state.focus.selection if self._state is not None else Selection()

    @property
    def scheduler(self) -> PollScheduler | None:
        return self._scheduler

    @property
    def moderation(self) -> ModerationCommandConsumer:
        return self._consumer

    async def login(self, user_id: str) -> None:
        """Create the user's state, rehydrated from storage, and start the list loops."""
        if self._state is not None:
            logger.warning(f"Login as {user_id} while {self._state.user_id} is logged in")
            await self.logout()

        state = SyncState.rehydrate(user_id, self._state_store)
        self._state = state
        self._processor = SnapshotProcessor(
            state,
            self.policy,
            self.audio,
            self.voice,
            EnginePublishers(
                notifications=self.notifications,
                voice_joins=self.voice_joins,
                voice_leaves=self.voice_leaves,
                message_pages=self.message_pages,
            ),
        )
        self._scheduler = PollScheduler(self._loop_definitions())
        self._scheduler.start(LoopName.SERVERS, state.user_id)
        self._scheduler.start(LoopName.DIRECT_CONVERSATIONS, state.user_id)
        self._sync_moderation_scope()
        logger.info(f"Logged in as {state.user_id}")

    async def logout(self) -> None:
        """Stop every loop and discard the user's state."""
        state, scheduler = self._state, self._scheduler
        if state is None:
            return

        self._state = None
        self._processor = None
        self._scheduler = None
        if scheduler is not None:
            await scheduler.stop_all(cancel_in_flight=True)
        state.discard(clear_persisted=self.config.clear_state_on_logout)
        self.audio.lock()
        logger.info(f"Logged out {state.user_id}")

    def select_server(self, server_id: str) -> None:
        self._navigate(Selection(server_id=server_id))

    def select_channel(self, server_id: str, channel_id: str) -> None:
        self._navigate(Selection(server_id=server_id, channel_id=channel_id))

    def select_conversation(self, conversation_id: str) -> None:
        self._navigate(Selection(conversation_id=conversation_id))

    def clear_selection(self) -> None:
        self._navigate(Selection())

    def on_focus_entity(self, entity: TrackedEntity) -> None:
        """Bring an entity on screen.

        Raises:
            ValueError: If a channel's server is neither known nor selected.
        """
        if entity.kind == EntityKind.SERVER:
            self.select_server(entity.id)
        elif entity.kind == EntityKind.DIRECT_CONVERSATION:
            self.select_conversation(entity.id)
        else:
            server_id = self._require_processor().server_of_channel(entity.id)
            server_id = server_id or self.selection.server_id
            if server_id is None:
                raise ValueError(f"Unknown server for channel {entity.id}")
            self.select_channel(server_id, entity.id)

    def get_unread_count(self, entity: TrackedEntity) -> int:
        if self._state is None:
            return 0
        return self._state.unread.get_count(entity)

    def get_total_unread(self, kind: EntityKind | None = None) -> int:
        if self._state is None:
            return 0
        return self._state.unread.total(kind)

    def subscribe_to_notification_events(
        self, callback: Callable[[NotificationEvent], Any]
    ) -> Callable[[], None]:
        return self.notifications.subscribe(callback)

    def subscribe_to_voice_join_events(
        self, callback: Callable[[VoiceJoinEvent], Any]
    ) -> Callable[[], None]:
        return self.voice_joins.subscribe(callback)

    def subscribe_to_voice_leave_events(
        self, callback: Callable[[VoiceLeaveEvent], Any]
    ) -> Callable[[], None]:
        return self.voice_leaves.subscribe(callback)

    def subscribe_to_message_pages(
        self, callback: Callable[[MessagePageEvent], Any]
    ) -> Callable[[], None]:
        return self.message_pages.subscribe(callback)

    def subscribe_to_selection_changes(
        self, callback: Callable[[SelectionChangeEvent], Any]
    ) -> Callable[[], None]:
        return self.selection_changes.subscribe(callback)

    def unlock_audio(self) -> None:
        """Record the user gesture that allows sounds to be played."""
        self.audio.unlock()

    def acknowledge_own_message(self, entity: TrackedEntity, created_at: datetime) -> None:
        self._require_processor().acknowledge_own_message(entity, created_at)

    def set_entity_muted(self, entity: TrackedEntity, muted: bool) -> None:
        self.policy.set_entity_muted(entity, muted)

    async def switch_voice_channel(self, server_id: str, channel_id: str) -> None:
        """Join a voice channel, leaving the current one first."""
        await self.voice.connect(server_id, channel_id)
        if self._state is not None:
            self._sync_moderation_scope()

    async def leave_voice(self) -> None:
        await self.voice.disconnect()
        if self._state is not None:
            self._sync_moderation_scope()

    def _navigate(self, selection: Selection) -> None:
        state = self._require_state()
        scheduler = self._require_scheduler()
        previous = state.navigate(selection)

        channel_scope = (
            (selection.server_id, selection.channel_id)
            if selection.server_id is not None and selection.channel_id is not None
            else None
        )
        scheduler.ensure(LoopName.CHANNEL_MESSAGES, channel_scope)
        scheduler.ensure(LoopName.DIRECT_MESSAGES, selection.conversation_id)
        scheduler.ensure(LoopName.VOICE_PRESENCE, selection.server_id)
        self._sync_moderation_scope()

        logger.debug(f"Navigated from {previous} to {selection}")
        self.selection_changes.publish(SelectionChangeEvent(previous=previous, current=selection))

    def _sync_moderation_scope(self) -> None:
        """Poll the mailbox of the voice server, or of the selected server when not in voice."""
        state = self._require_state()
        server_id = self.voice.current_server_id or state.focus.selection.server_id
        scope = (server_id, state.user_id) if server_id is not None else None
        self._require_scheduler().ensure(LoopName.MODERATION_COMMANDS, scope)

    def _require_state(self) -> SyncState:
        if self._state is None:
            raise RuntimeError("Not logged in")
        return self._state

    def _require_processor(self) -> SnapshotProcessor:
        if self._processor is None:
            raise RuntimeError("Not logged in")
        return self._processor

    def _require_scheduler(self) -> PollScheduler:
        if self._scheduler is None:
            raise RuntimeError("Not logged in")
        return self._scheduler

    def _page_request(self) -> PageRequest:
        return PageRequest(limit=self.config.message_page_limit)

    def _loop_definitions(self) -> list[LoopDefinition]:
        config = self.config
        return [
            LoopDefinition(
                LoopName.SERVERS,
                config.servers_poll_interval_seconds,
                fetch=self._chat_api.list_servers,
                apply=self._apply_servers,
            ),
            LoopDefinition(
                LoopName.CHANNEL_MESSAGES,
                config.channel_messages_poll_interval_seconds,
                fetch=self._fetch_channel_messages,
                apply=self._apply_channel_messages,
            ),
            LoopDefinition(
                LoopName.DIRECT_CONVERSATIONS,
                config.direct_conversations_poll_interval_seconds,
                fetch=self._chat_api.list_direct_conversations,
                apply=self._apply_direct_conversations,
            ),
            LoopDefinition(
                LoopName.DIRECT_MESSAGES,
                config.direct_messages_poll_interval_seconds,
                fetch=self._fetch_direct_messages,
                apply=self._apply_direct_messages,
            ),
            LoopDefinition(
                LoopName.VOICE_PRESENCE,
                config.voice_presence_poll_interval_seconds,
                fetch=self._chat_api.get_voice_presence,
                apply=self._apply_voice_presence,
            ),
            # A command is consumed once read, so a stale one is still applied;
            # the consumer checks it against the current voice session.
            LoopDefinition(
                LoopName.MODERATION_COMMANDS,
                config.moderation_poll_interval_seconds,
                fetch=self._fetch_moderation_command,
                apply=self._apply_moderation_command,
                on_stale=self._apply_moderation_command,
            ),
        ]

    async def _apply_servers(self, _user_id: str, servers: list[ServerSummary]) -> None:
        self._require_processor().process_servers(servers)

    async def _fetch_channel_messages(self, scope: tuple[str, str]) -> ChannelMessagePage:
        server_id, channel_id = scope
        return await self._chat_api.list_channel_messages_page(
            server_id, channel_id, self._page_request()
        )

    async def _apply_channel_messages(
        self, scope: tuple[str, str], page: ChannelMessagePage
    ) -> None:
        server_id, channel_id = scope
        self._require_processor().process_channel_page(server_id, channel_id, page)

    async def _apply_direct_conversations(
        self, _user_id: str, conversations: list[DirectConversationSummary]
    ) -> None:
        self._require_processor().process_direct_conversations(conversations)

    async def _fetch_direct_messages(self, conversation_id: str) -> DirectMessagePage:
        return await self._chat_api.list_direct_messages_page(
            conversation_id, self._page_request()
        )

    async def _apply_direct_messages(self, conversation_id: str, page: DirectMessagePage) -> None:
        self._require_processor().process_direct_page(conversation_id, page)

    async def _apply_voice_presence(
        self, server_id: str, snapshots: dict[str, PresenceSnapshot]
    ) -> None:
        self._require_processor().process_voice_presence(server_id, snapshots)

    async def _fetch_moderation_command(self, scope: tuple[str, str]) -> ModerationCommand | None:
        server_id, user_id = scope
        return await self._consumer.fetch(server_id, user_id)

    async def _apply_moderation_command(
        self, scope: tuple[str, str], command: ModerationCommand | None
    ) -> None:
        if command is None:
            return
        _server_id, user_id = scope
        await self._consumer.apply(command, user_id)
