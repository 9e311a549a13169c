"""Unread ledger: unread message counts derived from watermark comparisons."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from chat_sync.domain.models.errors import InvariantViolationError
from chat_sync.domain.models.tracked_entity import EntityKind, TrackedEntity
from chat_sync.domain.models.user_id import normalize_user_id

logger = logging.getLogger(__name__)


class UnreadLedger:
    """Holds unread counts per entity.

    Counts only grow through `on_incoming_message` and only drop to zero through
    `on_focus_entity`.
    """

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        """Initialize an empty ledger.

        Args:
            on_change: Called after every mutation, e.g. to persist the ledger.
        """
        self._counts: dict[TrackedEntity, int] = {}
        self._on_change = on_change

    def get_count(self, entity: TrackedEntity) -> int:
        return self._counts.get(entity, 0)

    def total(self, kind: EntityKind | None = None) -> int:
        """Sum of unread counts, optionally restricted to one entity kind."""
        return sum(
            count for entity, count in self._counts.items() if kind is None or entity.kind == kind
        )

    def on_incoming_message(
        self,
        entity: TrackedEntity,
        author_id: str,
        current_user_id: str,
        *,
        is_focused: bool,
        is_new: bool,
    ) -> bool:
        """Account for a message observed for an entity.

        The count is incremented iff the message is from another user, the entity
        is not focused, and the watermark store judged the message new.

        Returns:
            True if the count was incremented.
        """
        if not is_new or is_focused:
            return False
        if normalize_user_id(author_id) == normalize_user_id(current_user_id):
            return False

        self._counts[entity] = self._counts.get(entity, 0) + 1
        logger.debug(f"Unread count for {entity} is now {self._counts[entity]}")
        self._changed()
        return True

    def on_focus_entity(self, entity: TrackedEntity) -> None:
        """Reset the unread count of an entity that became focused."""
        if self._counts.pop(entity, 0) == 0:
            return
        logger.debug(f"Cleared unread count for {entity}")
        self._changed()

    def snapshot(self) -> dict[str, int]:
        """Serializable copy of every non-zero count, keyed by entity key."""
        return {entity.key: count for entity, count in self._counts.items() if count > 0}

    def restore(self, counts: Mapping[str, int]) -> None:
        """Load persisted counts, replacing the current ones.

        Raises:
            InvariantViolationError: If a count is negative or a key is malformed.
        """
        restored: dict[TrackedEntity, int] = {}
        for key, count in counts.items():
            if count < 0:
                raise InvariantViolationError(f"Negative unread count {count} for {key}")
            try:
                entity = TrackedEntity.from_key(key)
            except ValueError as e:
                raise InvariantViolationError(
                    f"Persisted unread count has invalid key: {key}"
                ) from e
            if count:
                restored[entity] = count
        self._counts = restored

    def clear(self) -> None:
        self._counts.clear()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
