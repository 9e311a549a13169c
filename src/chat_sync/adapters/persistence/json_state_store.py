"""JSON file storage of per-user synchronization state."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from chat_sync.domain.models.persisted_state import PersistedSyncState
from chat_sync.domain.models.user_id import normalize_user_id

logger = logging.getLogger(__name__)


class JsonStateStore:
    """Stores each user's state in its own JSON file under a state directory.

    The file name is derived from the normalized user id, so users sharing a
    device never read each other's state.
    """

    def __init__(self, state_dir: str | Path) -> None:
        """Initialize the store.

        Args:
            state_dir: Directory holding the state files; created on first save.
        """
        self.state_dir = Path(state_dir)

    def path_for(self, user_id: str) -> Path:
        digest = hashlib.sha256(normalize_user_id(user_id).encode("utf-8")).hexdigest()[:32]
        return self.state_dir / f"sync-state-{digest}.json"

    def load(self, user_id: str) -> PersistedSyncState | None:
        """Load a user's state; unreadable or invalid files are treated as absent."""
        path = self.path_for(user_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to read sync state from {path}: {e}")
            return None

        try:
            return PersistedSyncState.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Discarding invalid sync state in {path}: {e}")
            return None

    def save(self, user_id: str, state: PersistedSyncState) -> None:
        """Write a user's state atomically (temporary file, then rename)."""
        path = self.path_for(user_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(state.model_dump_json(), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            logger.warning(f"Failed to write sync state to {path}: {e}")

    def clear(self, user_id: str) -> None:
        path = self.path_for(user_id)
        try:
            path.unlink(missing_ok=True)
            logger.info(f"Cleared persisted sync state for {normalize_user_id(user_id)}")
        except OSError as e:
            logger.warning(f"Failed to delete sync state {path}: {e}")
