"""UTC time helpers.

SQLite hands datetimes back without tzinfo even when they were stored
aware, so anything read from the database goes through ``as_utc`` before it
is compared with ``utcnow()``.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def has_passed(value: datetime, now: datetime | None = None) -> bool:
    return as_utc(value) < (now or utcnow())
