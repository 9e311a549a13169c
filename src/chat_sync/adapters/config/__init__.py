"""Configuration adapters."""

from chat_sync.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
