"""UTC helpers shared by the services."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | str) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes and some rows store ISO strings, so both
    are normalized here; naive values are assumed to already be UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def next_utc_midnight(now: datetime) -> datetime:
    return start_of_day(as_utc(now).date() + timedelta(days=1))


__all__ = ["utcnow", "as_utc", "start_of_day", "next_utc_midnight"]
