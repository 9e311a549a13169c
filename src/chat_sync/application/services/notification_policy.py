"""Notification policy: whether an event should play a sound."""

from __future__ import annotations

import logging

from chat_sync.domain.models.events import NotificationCandidate
from chat_sync.domain.models.tracked_entity import TrackedEntity
from chat_sync.domain.models.user_id import normalize_user_id

logger = logging.getLogger(__name__)


def should_notify(candidate: NotificationCandidate) -> bool:
    """Decide whether a new message should play the notification sound.

    True iff the message is from another user, its entity is not focused and
    sound is enabled for the entity.
    """
    if normalize_user_id(candidate.author_id) == normalize_user_id(candidate.current_user_id):
        return False
    if candidate.is_focused:
        return False
    return not candidate.muted


class NotificationPolicy:
    """Applies the global sound switches and per-entity mutes to `should_notify`."""

    def __init__(
        self,
        *,
        chat_sound_enabled: bool = True,
        voice_join_sound_enabled: bool = True,
    ) -> None:
        self.chat_sound_enabled = chat_sound_enabled
        self.voice_join_sound_enabled = voice_join_sound_enabled
        self._muted: set[TrackedEntity] = set()

    def set_entity_muted(self, entity: TrackedEntity, muted: bool) -> None:
        if muted:
            self._muted.add(entity)
        else:
            self._muted.discard(entity)
        logger.info(f"Notification sound for {entity} {'muted' if muted else 'unmuted'}")

    def is_muted(self, *entities: TrackedEntity | None) -> bool:
        """True if the global switch is off or any of the given entities is muted."""
        if not self.chat_sound_enabled:
            return True
        return any(entity in self._muted for entity in entities if entity is not None)

    def should_notify(self, candidate: NotificationCandidate) -> bool:
        return should_notify(candidate)

    def should_play_voice_join(
        self,
        joined_user_id: str,
        current_user_id: str,
        channel_id: str,
        local_voice_channel_id: str | None,
    ) -> bool:
        """Decide whether a voice join plays the join sound.

        Only joins into the channel the local user is connected to are audible,
        and never the local user's own join.
        """
        if not self.voice_join_sound_enabled:
            return False
        if normalize_user_id(joined_user_id) == normalize_user_id(current_user_id):
            return False
        return local_voice_channel_id is not None and local_voice_channel_id == channel_id
