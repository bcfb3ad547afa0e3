"""Dashboard aggregation over visitor rows"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence

from pydantic import BaseModel

from domain.access import TzLike, get_zone, as_aware_utc, expiry_instant
from domain.models.visitor import Visitor


class Stats(BaseModel):
    total: int = 0
    authorized_count: int = 0
    unauthorized_count: int = 0
    expiring_soon_count: int = 0
    entered_count: int = 0


class DailyEntryCount(BaseModel):
    day: date
    label: str  # dd/mm
    count: int


def compute_stats(
    records: Iterable[Visitor],
    now: datetime,
    tz: TzLike = "UTC",
    window_days: int = 7,
) -> Stats:
    now_utc = as_aware_utc(now)
    horizon = now_utc + timedelta(days=window_days)
    stats = Stats()

    for record in records:
        stats.total += 1

        if record.authorized:
            stats.authorized_count += 1
            expires_at = expiry_instant(record.authorization_expiry, tz)
            if now_utc <= expires_at <= horizon:
                stats.expiring_soon_count += 1
        else:
            stats.unauthorized_count += 1

        if record.last_entry_at is not None:
            stats.entered_count += 1

    return stats


def daily_entry_histogram(
    records: Sequence[Visitor],
    now: datetime,
    days: int = 7,
    tz: TzLike = "UTC",
) -> List[DailyEntryCount]:
    """Entries per local calendar day for the trailing ``days`` days, oldest first.

    Only ``last_entry_at`` is stored, so each visitor counts at most once, on
    the day of its most recent entry.
    """
    zone = get_zone(tz)
    today = as_aware_utc(now).astimezone(zone).date()
    buckets = {today - timedelta(days=offset): 0 for offset in range(days)}

    for record in records:
        if record.last_entry_at is None:
            continue
        entry_day = as_aware_utc(record.last_entry_at).astimezone(zone).date()
        if entry_day in buckets:
            buckets[entry_day] += 1

    return [
        DailyEntryCount(day=day, label=day.strftime("%d/%m"), count=buckets[day])
        for day in sorted(buckets)
    ]
