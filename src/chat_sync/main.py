"""Main entry point for the headless chat sync client."""

import argparse
import asyncio
import logging
import sys

import aiohttp

from chat_sync.adapters.audio import TerminalBellPlayer
from chat_sync.adapters.chat_api import HttpChatApi
from chat_sync.adapters.config import AppConfig
from chat_sync.adapters.notices import LoggingNoticeSink
from chat_sync.adapters.voice import HeadlessVoiceConnection
from chat_sync.domain.models import (
    NotificationEvent,
    TrackedEntity,
    VoiceJoinEvent,
    VoiceLeaveEvent,
)
from chat_sync.sync_client import SyncClient

logger = logging.getLogger(__name__)


def _setup_argparse() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Keep a chat client in sync with the server by polling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chat-sync --user-id alice
  chat-sync --user-id alice --server-id s1 --channel-id general
  chat-sync --user-id alice --conversation-id dm-42 --config-file config.toml
        """,
    )
    parser.add_argument("--user-id", required=True, help="User to log in as")
    parser.add_argument("--server-id", help="Server to select after login")
    parser.add_argument("--channel-id", help="Text channel to open (requires --server-id)")
    parser.add_argument("--conversation-id", help="Direct conversation to open")
    parser.add_argument("--config-file", help="TOML configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _log_notification(event: NotificationEvent) -> None:
    logger.info(
        f"New message in {event.entity} from {event.author_id} "
        f"(unread: {event.unread_count}, sound: {event.sound_requested})"
    )


def _log_voice_join(event: VoiceJoinEvent) -> None:
    logger.info(f"{event.user_name or event.user_id} joined voice channel {event.channel_id}")


def _log_voice_leave(event: VoiceLeaveEvent) -> None:
    logger.info(f"{event.user_id} left voice channel {event.channel_id}")


async def main(argv: list[str] | None = None) -> None:
    """Main application entry point."""
    args = _setup_argparse().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    if args.channel_id and not args.server_id:
        logger.error("--channel-id requires --server-id")
        sys.exit(2)

    config = AppConfig()
    if args.config_file:
        config.config_file = args.config_file
    try:
        config.load_toml_overrides()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    async with aiohttp.ClientSession() as session:
        client = SyncClient(
            config,
            HttpChatApi(session, config),
            sound_player=TerminalBellPlayer(),
            voice=HeadlessVoiceConnection(),
            notices=LoggingNoticeSink(),
        )
        client.subscribe_to_notification_events(_log_notification)
        client.subscribe_to_voice_join_events(_log_voice_join)
        client.subscribe_to_voice_leave_events(_log_voice_leave)

        await client.login(args.user_id)
        # Running in a terminal counts as the gesture that allows sounds.
        client.unlock_audio()

        if args.conversation_id:
            client.on_focus_entity(TrackedEntity.direct_conversation(args.conversation_id))
        elif args.channel_id:
            client.select_channel(args.server_id, args.channel_id)
        elif args.server_id:
            client.select_server(args.server_id)

        try:
            await asyncio.Event().wait()
        finally:
            logger.info("Shutting down...")
            await client.logout()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
