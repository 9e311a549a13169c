"""Adapters layer - chat server, storage, audio and polling integrations."""

from chat_sync.adapters.chat_api import HttpChatApi
from chat_sync.adapters.config import AppConfig
from chat_sync.adapters.persistence import JsonStateStore

__all__ = [
    "AppConfig",
    "HttpChatApi",
    "JsonStateStore",
]
