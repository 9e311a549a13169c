"""Per-user synchronization state containers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chat_sync.application.services.focus_context import FocusContext
from chat_sync.application.services.presence_differ import PresenceDiffer
from chat_sync.application.services.unread_ledger import UnreadLedger
from chat_sync.application.services.watermark_store import WatermarkStore
from chat_sync.domain.models.errors import InvariantViolationError
from chat_sync.domain.models.persisted_state import PersistedSyncState
from chat_sync.domain.models.user_id import normalize_user_id

if TYPE_CHECKING:
    from chat_sync.domain.contracts.state_store import SyncStateStoreProtocol
    from chat_sync.domain.models.selection import Selection

logger = logging.getLogger(__name__)


class SyncState:
    """The named state containers owned by one logged-in user.

    Created on login, discarded on logout. Watermarks and unread counts are
    written to the user's durable namespace after every mutation.
    """

    def __init__(self, user_id: str, store: SyncStateStoreProtocol | None = None) -> None:
        self.user_id = normalize_user_id(user_id)
        self.focus = FocusContext()
        self.watermarks = WatermarkStore(on_change=self.persist)
        self.unread = UnreadLedger(on_change=self.persist)
        self.presence = PresenceDiffer()
        self._store = store

    @classmethod
    def rehydrate(cls, user_id: str, store: SyncStateStoreProtocol | None) -> SyncState:
        """Create the state for a user, restoring whatever was persisted for them."""
        state = cls(user_id, store)
        persisted = store.load(state.user_id) if store is not None else None
        if persisted is None:
            return state
        try:
            state.watermarks.restore(persisted.watermarks)
            state.unread.restore(persisted.unread)
        except InvariantViolationError as e:
            logger.error(f"Ignoring persisted sync state of {state.user_id}: {e}")
            state.watermarks.clear()
            state.unread.clear()
        else:
            logger.info(
                f"Rehydrated sync state for {state.user_id}: "
                f"{len(persisted.watermarks)} watermarks, {len(persisted.unread)} unread entries"
            )
        return state

    def navigate(self, selection: Selection) -> Selection:
        """Apply a navigation: focus first, then reset unread counts of what is now on screen.

        Returns:
            The previous selection.
        """
        previous = self.focus.set_selection(selection)
        if selection.server_entity is not None:
            self.unread.on_focus_entity(selection.server_entity)
        if selection.focused_entity is not None:
            self.unread.on_focus_entity(selection.focused_entity)
        if previous.server_id != selection.server_id:
            self.presence.reset()
        return previous

    def to_persisted(self) -> PersistedSyncState:
        return PersistedSyncState(
            watermarks=self.watermarks.snapshot(),
            unread=self.unread.snapshot(),
        )

    def persist(self) -> None:
        if self._store is not None:
            self._store.save(self.user_id, self.to_persisted())

    def discard(self, *, clear_persisted: bool) -> None:
        """Drop in-memory state, optionally deleting the persisted namespace too."""
        self.watermarks.clear()
        self.unread.clear()
        self.presence.reset()
        if clear_persisted and self._store is not None:
            self._store.clear(self.user_id)
        logger.info(f"Discarded sync state for {self.user_id}")
