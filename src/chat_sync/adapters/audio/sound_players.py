"""Sound playback adapters, including the shared audio unlock gate."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

from chat_sync.domain.contracts.sound_player import SoundPlayerProtocol

if TYPE_CHECKING:
    from chat_sync.domain.models.events import SoundKind

logger = logging.getLogger(__name__)


class AudioUnlockGate(SoundPlayerProtocol):
    """Blocks playback until the user has interacted once.

    Sounds requested while locked are dropped, never queued: a decision made
    before the unlock is not replayed afterwards.
    """

    def __init__(self, player: SoundPlayerProtocol) -> None:
        self._player = player
        self._unlocked = False

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    def unlock(self) -> None:
        """Record the user gesture that allows playback."""
        if not self._unlocked:
            self._unlocked = True
            logger.debug("Audio playback unlocked")

    def lock(self) -> None:
        """Require a new gesture, e.g. after logout."""
        self._unlocked = False

    def play_sound(self, sound: SoundKind) -> None:
        if not self._unlocked:
            logger.debug(f"Dropping {sound} sound: audio not unlocked yet")
            return
        try:
            self._player.play_sound(sound)
        except Exception as e:
            logger.error(f"Failed to play {sound} sound: {e}", exc_info=True)


class TerminalBellPlayer(SoundPlayerProtocol):
    """Rings the terminal bell; used by the headless runner."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def play_sound(self, sound: SoundKind) -> None:
        stream = self._stream or sys.stderr
        stream.write("\a")
        stream.flush()
        logger.debug(f"Played {sound} sound")
