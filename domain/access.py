"""Visitor authorization evaluation.

A visitor is let in when the ``authorized`` flag is set and the authorization
has not expired. The stored expiry is a calendar date; it is turned into the
instant 00:00 of that date in the local timezone and compared against ``now``
as a plain timestamp. The same rule is used by the public lookup, the
dashboard and the store-side guard of entry registration.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union
from zoneinfo import ZoneInfo

from domain.models.visitor import Visitor


class AccessDecision(str, Enum):
    AUTHORIZED = "authorized"
    EXPIRED_AUTHORIZATION = "expired_authorization"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"


TzLike = Union[str, ZoneInfo, timezone]


def get_zone(tz: TzLike):
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def as_aware_utc(dt: datetime) -> datetime:
    """Naive datetimes are stored as UTC; give them a tzinfo."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def expiry_instant(expiry: Union[date, datetime], tz: TzLike) -> datetime:
    if isinstance(expiry, datetime):
        return as_aware_utc(expiry)
    return datetime.combine(expiry, time.min, tzinfo=get_zone(tz))


def is_expired(expiry: Union[date, datetime], now: datetime, tz: TzLike) -> bool:
    return expiry_instant(expiry, tz) < as_aware_utc(now)


def earliest_valid_expiry(now: datetime, tz: TzLike) -> date:
    """Smallest expiry date that is still valid at ``now``."""
    local_today = as_aware_utc(now).astimezone(get_zone(tz)).date()
    if is_expired(local_today, now, tz):
        return local_today + timedelta(days=1)
    return local_today


def evaluate(record: Optional[Visitor], now: datetime, tz: TzLike = "UTC") -> AccessDecision:
    if record is None:
        return AccessDecision.NOT_FOUND
    if not record.authorized:
        return AccessDecision.UNAUTHORIZED
    if is_expired(record.authorization_expiry, now, tz):
        return AccessDecision.EXPIRED_AUTHORIZATION
    return AccessDecision.AUTHORIZED


DECISION_TITLES = {
    AccessDecision.AUTHORIZED: "✅ Visitante Autorizado",
    AccessDecision.EXPIRED_AUTHORIZATION: "🚫 Acceso No Autorizado",
    AccessDecision.UNAUTHORIZED: "🚫 Acceso No Autorizado",
    AccessDecision.NOT_FOUND: "🚫 Visitante No Encontrado",
}

EXPIRED_NOTICE = "Autorización vencida"
NOT_FOUND_NOTICE = "No existe registro para la cédula ingresada"
