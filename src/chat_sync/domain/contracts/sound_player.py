"""Protocol for playing notification sounds."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chat_sync.domain.models.events import SoundKind


class SoundPlayerProtocol(Protocol):
    """Plays a notification sound without blocking."""

    def play_sound(self, sound: "SoundKind") -> None:
        """Play a sound now, or drop it if playback is not possible."""
        ...
