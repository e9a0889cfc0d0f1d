"""File-backed key-value slots for on-device persistence."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class LocalStorage:
    """
    Durable string slots on the local filesystem.

    Each key is stored as one file under `directory`. Writes go through a
    temporary file and an atomic rename, so a crash never leaves a
    half-written value behind.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def ensure_directory(self) -> None:
        """Create the storage directory if it doesn't exist."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Filesystem path holding a key's value."""
        if not key:
            raise ValueError("Storage key cannot be empty")
        return self.directory / _UNSAFE_KEY_CHARS.sub("_", key)

    def get_item(self, key: str) -> str | None:
        """Read a value, or None if the key was never written."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one."""
        self.ensure_directory()
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        """Delete a value. Missing keys are ignored."""
        self.path_for(key).unlink(missing_ok=True)
