"""Moderation command consumer: applies kick/move commands from the user's mailbox."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from chat_sync.domain.models.moderation import (
    ConsumerState,
    ModerationCommand,
    ModerationCommandType,
    ModerationOutcome,
)
from chat_sync.domain.models.user_id import normalize_user_id

if TYPE_CHECKING:
    from chat_sync.domain.contracts.chat_api import ChatApiProtocol
    from chat_sync.domain.contracts.notice_sink import NoticeSinkProtocol
    from chat_sync.domain.contracts.voice_connection import VoiceConnectionProtocol

logger = logging.getLogger(__name__)

KICK_NOTICE = "You were removed from the voice channel by a moderator."
MOVE_NOTICE = "You were moved to another voice channel by a moderator."
APPLY_FAILED_NOTICE = "A moderator action could not be applied."

# Ids of recently handled commands, to ignore a redelivered command.
REMEMBERED_COMMAND_IDS = 64


def _with_reason(notice: str, reason: str | None) -> str:
    return f"{notice} Reason: {reason}" if reason else notice


class ModerationCommandConsumer:
    """Takes at most one pending command per tick and applies it to the voice session.

    A command counts as consumed as soon as it has been read from the mailbox:
    if applying it fails, the failure is shown to the user and the command is not
    retried.
    """

    def __init__(
        self,
        chat_api: ChatApiProtocol,
        voice: VoiceConnectionProtocol,
        notices: NoticeSinkProtocol,
        *,
        switch_channel: Callable[[str, str], Awaitable[None]] | None = None,
        disconnect: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the consumer.

        Args:
            chat_api: Source of pending commands.
            voice: The local voice session, read to decide whether a command applies.
            notices: Sink for user-visible notices.
            switch_channel: Procedure used for a manual voice channel switch;
                defaults to ``voice.connect``.
            disconnect: Procedure used to leave voice; defaults to ``voice.disconnect``.
        """
        self._chat_api = chat_api
        self._voice = voice
        self._notices = notices
        self._switch_channel = switch_channel or voice.connect
        self._disconnect = disconnect or voice.disconnect
        self._handled_ids: deque[str] = deque(maxlen=REMEMBERED_COMMAND_IDS)
        self.state = ConsumerState.IDLE

    async def fetch(self, server_id: str, user_id: str) -> ModerationCommand | None:
        """Take the next pending command for the user from a server's mailbox."""
        self.state = ConsumerState.POLLING
        try:
            command = await self._chat_api.get_next_moderation_command(server_id, user_id)
        except BaseException:
            self.state = ConsumerState.IDLE
            raise

        if command is None:
            self.state = ConsumerState.IDLE
            return None

        self.state = ConsumerState.COMMAND_FOUND
        logger.info(f"Moderation command {command.type} found in mailbox of server {server_id}")
        return command.model_copy(update={"server_id": server_id})

    async def apply(self, command: ModerationCommand, user_id: str) -> ModerationOutcome:
        """Apply a command taken from the mailbox.

        Returns:
            The outcome; the consumer is back to idle afterwards.
        """
        self.state = ConsumerState.APPLYING
        try:
            return await self._apply(command, user_id)
        finally:
            self.state = ConsumerState.IDLE

    async def tick(self, server_id: str, user_id: str) -> ModerationOutcome:
        """Fetch and apply at most one command."""
        command = await self.fetch(server_id, user_id)
        if command is None:
            return ModerationOutcome.NO_COMMAND
        return await self.apply(command, user_id)

    async def _apply(self, command: ModerationCommand, user_id: str) -> ModerationOutcome:
        if command.id is not None:
            if command.id in self._handled_ids:
                logger.warning(f"Ignoring redelivered moderation command {command.id}")
                return ModerationOutcome.DUPLICATE
            self._handled_ids.append(command.id)

        if command.target_user_id and command.target_user_id != normalize_user_id(user_id):
            logger.warning(
                f"Ignoring moderation command addressed to {command.target_user_id}, "
                f"current user is {user_id}"
            )
            return ModerationOutcome.NOT_APPLICABLE

        if not self._in_voice_of(command.server_id):
            logger.info(f"Moderation {command.type} ignored: not connected to voice")
            return ModerationOutcome.NOT_APPLICABLE

        try:
            if command.type == ModerationCommandType.KICK:
                await self._disconnect()
                self._notices.show_notice(_with_reason(KICK_NOTICE, command.reason))
            else:
                if not command.target_channel_id:
                    logger.warning(f"Move command {command.id} has no target channel")
                    return ModerationOutcome.NOT_APPLICABLE
                if command.target_channel_id == self._voice.current_channel_id:
                    logger.info(f"Already in voice channel {command.target_channel_id}")
                    return ModerationOutcome.NOT_APPLICABLE
                await self._switch_channel(command.server_id or "", command.target_channel_id)
                self._notices.show_notice(_with_reason(MOVE_NOTICE, command.reason))
        except Exception as e:
            logger.warning(f"Failed to apply moderation {command.type}: {e}", exc_info=True)
            self._notices.show_notice(APPLY_FAILED_NOTICE)
            return ModerationOutcome.APPLY_FAILED

        logger.info(f"Applied moderation {command.type} (command {command.id})")
        return ModerationOutcome.APPLIED

    def _in_voice_of(self, server_id: str | None) -> bool:
        if self._voice.current_channel_id is None:
            return False
        return server_id is None or self._voice.current_server_id == server_id
