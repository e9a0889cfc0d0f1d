"""Board snapshot cache and guest flag on top of local storage."""

from __future__ import annotations

import logging

from ..models import DEFAULT_LABELS, BoardState
from .local import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "taskflow-board-v1"
GUEST_KEY = "taskflow-guest"


class BoardCache:
    """
    Last known board, kept on the device.

    Guest sessions use it as their only store; authenticated sessions keep
    it as an offline mirror. Nothing here raises: unreadable or corrupt
    data reads as "no snapshot" and failed writes are logged.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage

    def load(self) -> BoardState | None:
        """Read the snapshot. Returns None if absent or unparseable."""
        try:
            raw = self.storage.get_item(STORAGE_KEY)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read board cache: %s", e)
            return None
        if not raw:
            return None

        try:
            state = BoardState.model_validate_json(raw)
        except ValueError as e:
            logger.warning("Ignoring malformed board cache: %s", e)
            return None

        if not state.labels:
            state = state.model_copy(update={"labels": DEFAULT_LABELS})
        logger.debug(
            "Board cache loaded: %d tasks, %d labels", len(state.tasks), len(state.labels)
        )
        return state

    def save(self, state: BoardState) -> None:
        """Write the snapshot."""
        try:
            self.storage.set_item(STORAGE_KEY, state.to_json())
        except OSError as e:
            logger.warning("Could not write board cache: %s", e)

    def clear(self) -> None:
        """Forget the snapshot."""
        try:
            self.storage.remove_item(STORAGE_KEY)
        except OSError as e:
            logger.warning("Could not clear board cache: %s", e)

    def is_guest(self) -> bool:
        """Whether this device was put in guest mode."""
        try:
            return self.storage.get_item(GUEST_KEY) == "1"
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read guest flag: %s", e)
            return False

    def set_guest(self, enabled: bool) -> None:
        """Turn guest mode on or off for this device."""
        try:
            if enabled:
                self.storage.set_item(GUEST_KEY, "1")
            else:
                self.storage.remove_item(GUEST_KEY)
        except OSError as e:
            logger.warning("Could not update guest flag: %s", e)
