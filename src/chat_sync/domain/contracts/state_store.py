"""Protocol for durable per-user storage of synchronization state."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chat_sync.domain.models.persisted_state import PersistedSyncState


class SyncStateStoreProtocol(Protocol):
    """Durable storage namespaced by user id."""

    def load(self, user_id: str) -> "PersistedSyncState | None":
        """Load the user's state, or None if nothing usable is stored."""
        ...

    def save(self, user_id: str, state: "PersistedSyncState") -> None:
        """Replace the user's stored state."""
        ...

    def clear(self, user_id: str) -> None:
        """Delete the user's stored state."""
        ...
