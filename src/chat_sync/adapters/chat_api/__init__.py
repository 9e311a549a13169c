"""Chat server adapters."""

from chat_sync.adapters.chat_api.http_chat_api import HttpChatApi

__all__ = ["HttpChatApi"]
