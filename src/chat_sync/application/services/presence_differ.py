"""Presence differ: join/leave detection between voice roster snapshots."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from chat_sync.domain.models.presence import PresenceDiff, PresenceSnapshot

logger = logging.getLogger(__name__)


def diff(
    channel_id: str,
    previous_membership: frozenset[str] | None,
    new_snapshot: PresenceSnapshot,
) -> PresenceDiff:
    """Compare a channel's previous membership with a new snapshot.

    Args:
        channel_id: The voice channel.
        previous_membership: User ids present at the last tick, or None if the
            channel was never observed.
        new_snapshot: The roster returned by this tick.

    Returns:
        PresenceDiff of joined and left user ids. The first observation of a
        channel reports nothing, so members already present are not announced.
    """
    if previous_membership is None:
        return PresenceDiff(channel_id=channel_id)

    current = new_snapshot.member_ids()
    joined = tuple(m.user_id for m in new_snapshot.members if m.user_id not in previous_membership)
    left = tuple(sorted(previous_membership - current))
    return PresenceDiff(channel_id=channel_id, joined=joined, left=left)


class PresenceDiffer:
    """Remembers each channel's membership from the previous tick."""

    def __init__(self) -> None:
        self._memberships: dict[str, frozenset[str]] = {}

    def membership(self, channel_id: str) -> frozenset[str] | None:
        return self._memberships.get(channel_id)

    def apply(self, snapshots: Mapping[str, PresenceSnapshot]) -> list[PresenceDiff]:
        """Diff a full presence response against the previous tick.

        Channels missing from the response are forgotten; if they come back they
        are treated as observed for the first time.

        Returns:
            One non-empty PresenceDiff per channel that changed.
        """
        diffs: list[PresenceDiff] = []
        for channel_id, snapshot in snapshots.items():
            result = diff(channel_id, self._memberships.get(channel_id), snapshot)
            self._memberships[channel_id] = snapshot.member_ids()
            if not result.is_empty:
                diffs.append(result)

        for channel_id in set(self._memberships) - set(snapshots):
            del self._memberships[channel_id]
            logger.debug(f"Voice channel {channel_id} no longer reported, forgetting membership")

        return diffs

    def reset(self) -> None:
        """Forget every membership (e.g. when the active server changes)."""
        self._memberships.clear()
