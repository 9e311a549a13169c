"""Voice connection adapters."""

from chat_sync.adapters.voice.headless_voice_connection import HeadlessVoiceConnection

__all__ = ["HeadlessVoiceConnection"]
