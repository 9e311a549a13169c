"""Watermark store: per-entity timestamp of the latest accounted-for message."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime

from chat_sync.domain.models.errors import InvariantViolationError
from chat_sync.domain.models.timestamps import ensure_utc
from chat_sync.domain.models.tracked_entity import TrackedEntity
from chat_sync.domain.models.watermark import ObserveResult

logger = logging.getLogger(__name__)


class WatermarkStore:
    """Holds, per tracked entity, the latest message timestamp already accounted for.

    Watermarks only ever move forward: every mutation goes through a max()
    comparison, so an out-of-order poll response can never lower a stored value.

    The first observation of an entity bootstraps its watermark to the latest
    known value without reporting it as new, so that loading a history that was
    never seen before does not produce a burst of notifications. An entity first
    seen with an empty history is remembered as such (watermark ``None``); its
    first message after that is new.
    """

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        """Initialize an empty store.

        Args:
            on_change: Called after every mutation, e.g. to persist the store.
        """
        self._watermarks: dict[TrackedEntity, datetime | None] = {}
        self._on_change = on_change

    def is_tracked(self, entity: TrackedEntity) -> bool:
        return entity in self._watermarks

    def get(self, entity: TrackedEntity) -> datetime | None:
        return self._watermarks.get(entity)

    def observe(self, entity: TrackedEntity, candidate: datetime | None) -> ObserveResult:
        """Offer the timestamp of the latest message seen for an entity.

        Args:
            entity: The entity the timestamp belongs to.
            candidate: Timestamp of the latest message, or None for an empty history.

        Returns:
            ObserveResult with ``is_new`` True iff the candidate is strictly newer
            than a previously stored watermark.
        """
        if candidate is not None:
            candidate = ensure_utc(candidate)
        if entity not in self._watermarks:
            self._watermarks[entity] = candidate
            logger.debug(f"Bootstrapped watermark for {entity} at {candidate}")
            self._changed()
            return ObserveResult(is_new=False, watermark=candidate, bootstrapped=True)

        stored = self._watermarks[entity]
        if candidate is None:
            return ObserveResult(is_new=False, watermark=stored)

        if stored is not None and candidate <= stored:
            if candidate < stored:
                logger.debug(
                    f"Ignoring older timestamp {candidate} for {entity} (watermark {stored})"
                )
            return ObserveResult(is_new=False, watermark=stored)

        self._watermarks[entity] = candidate
        self._changed()
        return ObserveResult(is_new=True, watermark=candidate)

    def raise_to(self, entity: TrackedEntity, timestamp: datetime) -> bool:
        """Raise a watermark without treating the timestamp as a new message.

        Used for messages the local user sent. Tracks the entity if unknown.
        A naive timestamp is taken as local time, as ``datetime.now()`` returns it.

        Returns:
            True if the stored watermark changed.
        """
        timestamp = timestamp.astimezone(UTC)
        stored = self._watermarks.get(entity)
        if entity in self._watermarks and stored is not None and timestamp <= stored:
            return False
        self._watermarks[entity] = timestamp
        self._changed()
        return True

    def snapshot(self) -> dict[str, datetime | None]:
        """Serializable copy of every watermark, keyed by entity key."""
        return {entity.key: value for entity, value in self._watermarks.items()}

    def restore(self, watermarks: Mapping[str, datetime | None]) -> None:
        """Merge persisted watermarks into the store.

        Raises:
            InvariantViolationError: If a key does not name a tracked entity kind.
        """
        for key, value in watermarks.items():
            try:
                entity = TrackedEntity.from_key(key)
            except ValueError as e:
                raise InvariantViolationError(f"Persisted watermark has invalid key: {key}") from e
            if value is not None:
                value = ensure_utc(value)
            current = self._watermarks.get(entity)
            if entity in self._watermarks and (
                value is None or (current is not None and value <= current)
            ):
                continue
            self._watermarks[entity] = value
        logger.debug(f"Restored {len(self._watermarks)} watermarks")

    def clear(self) -> None:
        self._watermarks.clear()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
