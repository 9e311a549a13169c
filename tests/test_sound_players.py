"""Tests for the audio adapters."""

import io
from unittest.mock import MagicMock

from fakes import RecordingSoundPlayer

from chat_sync.adapters.audio import AudioUnlockGate, TerminalBellPlayer
from chat_sync.domain.models import SoundKind


def test_sounds_before_unlock_are_dropped_not_queued() -> None:
    """Given audio is locked, when sounds are requested, then none are replayed after unlock."""
    player = RecordingSoundPlayer()
    gate = AudioUnlockGate(player)

    gate.play_sound(SoundKind.MESSAGE)
    gate.unlock()

    assert player.sounds == []
    gate.play_sound(SoundKind.VOICE_JOIN)
    assert player.sounds == [SoundKind.VOICE_JOIN]


def test_lock_requires_new_gesture() -> None:
    player = RecordingSoundPlayer()
    gate = AudioUnlockGate(player)
    gate.unlock()

    gate.lock()
    gate.play_sound(SoundKind.MESSAGE)

    assert not gate.is_unlocked
    assert player.sounds == []


def test_player_failure_is_contained() -> None:
    player = MagicMock()
    player.play_sound.side_effect = OSError("no audio device")
    gate = AudioUnlockGate(player)
    gate.unlock()

    gate.play_sound(SoundKind.MESSAGE)

    player.play_sound.assert_called_once_with(SoundKind.MESSAGE)


def test_terminal_bell_writes_bell_character() -> None:
    stream = io.StringIO()

    TerminalBellPlayer(stream).play_sound(SoundKind.MESSAGE)

    assert stream.getvalue() == "\a"
