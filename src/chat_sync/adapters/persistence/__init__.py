"""Persistence adapters for per-user sync state."""

from chat_sync.adapters.persistence.json_state_store import JsonStateStore

__all__ = ["JsonStateStore"]
