"""On-device persistence."""

from .cache import GUEST_KEY, STORAGE_KEY, BoardCache
from .local import LocalStorage

__all__ = [
    "GUEST_KEY",
    "STORAGE_KEY",
    "BoardCache",
    "LocalStorage",
]
