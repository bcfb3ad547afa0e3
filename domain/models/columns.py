"""Timestamp column shared by every table"""
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_aware_utc(value: datetime) -> datetime:
    # Naive values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """timestamptz on Postgres; always read back as aware UTC (SQLite drops the offset)"""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return _to_aware_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return _to_aware_utc(value)
