"""Date-time helpers.

Timestamps are persisted as naive UTC values so comparisons behave the same on
PostgreSQL and SQLite.
"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Current time as naive UTC."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware timestamp to naive UTC; naive values are assumed UTC already."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def quiz_day(now: datetime | None = None) -> date:
    """Calendar day (UTC) a quiz attempt belongs to."""

    current = as_naive_utc(now) if now else utcnow()
    return current.date()
