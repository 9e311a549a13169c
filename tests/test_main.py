"""Tests for the command line entry point."""

import pytest

from chat_sync.main import _setup_argparse


def test_parses_navigation_arguments() -> None:
    args = _setup_argparse().parse_args(
        ["--user-id", "alice", "--server-id", "s1", "--channel-id", "a", "-v"]
    )

    assert args.user_id == "alice"
    assert args.server_id == "s1"
    assert args.channel_id == "a"
    assert args.verbose is True
    assert args.conversation_id is None


def test_user_id_is_required() -> None:
    with pytest.raises(SystemExit):
        _setup_argparse().parse_args([])
