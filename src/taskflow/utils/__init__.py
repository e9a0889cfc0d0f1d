"""Utility functions."""

from .datetime import now_utc, utc_date
from .ids import new_id

__all__ = ["new_id", "now_utc", "utc_date"]
