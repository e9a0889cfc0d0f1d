"""Utilities for datetime handling."""

from datetime import UTC, date, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def utc_date(moment: datetime) -> date:
    """Calendar date of a moment in UTC. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(UTC).date()
