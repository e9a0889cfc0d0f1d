"""taskflow - personal task board with guest and synced persistence."""

__version__ = "0.1.0"
