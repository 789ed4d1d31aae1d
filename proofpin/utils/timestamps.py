"""Timestamp helpers shared by the threading and activity code.

Databases disagree about timezone round-tripping: PostgreSQL returns aware
datetimes for timestamptz columns while SQLite hands back naive ones. Every
comparison of comment and view times goes through as_utc so naive values
are read as UTC instead of raising on mixed comparisons.
"""

from datetime import UTC, datetime

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)
