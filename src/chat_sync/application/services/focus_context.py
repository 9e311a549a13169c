"""Focus context: which entity the user is currently viewing."""

from __future__ import annotations

import logging

from chat_sync.domain.models.selection import Selection
from chat_sync.domain.models.tracked_entity import EntityKind, TrackedEntity

logger = logging.getLogger(__name__)


class FocusContext:
    """Process-wide navigation state.

    Written synchronously by navigation, read by poll completions.
    """

    def __init__(self) -> None:
        self._selection = Selection()
        self.version = 0

    @property
    def selection(self) -> Selection:
        return self._selection

    def set_selection(self, selection: Selection) -> Selection:
        """Replace the selection.

        Returns:
            The previous selection.
        """
        previous = self._selection
        self._selection = selection
        self.version += 1
        logger.debug(f"Focus changed from {previous} to {selection}")
        return previous

    def is_focused(self, entity: TrackedEntity) -> bool:
        """A server counts as focused while it is the selected server."""
        if entity.kind == EntityKind.SERVER:
            return self._selection.server_id == entity.id
        return self._selection.focused_entity == entity
