from __future__ import annotations

from datetime import datetime


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a bare date means midnight."""
    return datetime.fromisoformat(value.strip())


def start_of_day(value: datetime) -> datetime:
    """Floor to 00:00:00 of the same day, keeping the timezone."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    """Ceil to 23:59:59 of the same day, keeping the timezone."""
    return value.replace(hour=23, minute=59, second=59, microsecond=0)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
