"""Event broadcasters."""

from chat_sync.adapters.broadcasters.event_broadcaster import EventBroadcaster

__all__ = ["EventBroadcaster"]
