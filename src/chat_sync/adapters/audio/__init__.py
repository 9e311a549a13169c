"""Audio adapters."""

from chat_sync.adapters.audio.sound_players import AudioUnlockGate, TerminalBellPlayer

__all__ = ["AudioUnlockGate", "TerminalBellPlayer"]
