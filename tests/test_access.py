"""Authorization evaluation"""
from datetime import date, datetime, timedelta, timezone

import pytest

from domain.access import (
    AccessDecision,
    earliest_valid_expiry,
    evaluate,
    expiry_instant,
    is_expired,
)
from domain.models import Visitor

NOW = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)


def visitor(authorized=True, expiry=date(2026, 10, 25)):
    return Visitor(
        id_number="12345",
        full_name="María González",
        authorization_expiry=expiry,
        authorized=authorized,
    )


def test_missing_record_is_not_found():
    assert evaluate(None, NOW) == AccessDecision.NOT_FOUND


@pytest.mark.parametrize("expiry", [date(2020, 1, 1), date(2026, 10, 18), date(2030, 1, 1)])
def test_unauthorized_flag_wins_over_expiry(expiry):
    assert evaluate(visitor(authorized=False, expiry=expiry), NOW) == AccessDecision.UNAUTHORIZED


@pytest.mark.parametrize("expiry", [date(2026, 10, 19), date(2026, 10, 25), date(2027, 3, 1)])
def test_future_expiry_is_authorized(expiry):
    assert evaluate(visitor(expiry=expiry), NOW) == AccessDecision.AUTHORIZED


@pytest.mark.parametrize("expiry", [date(2026, 10, 17), date(2026, 10, 18), date(2025, 1, 1)])
def test_past_expiry_is_expired(expiry):
    # The stored date counts from 00:00, so "today" is already past at 12:30
    assert evaluate(visitor(expiry=expiry), NOW) == AccessDecision.EXPIRED_AUTHORIZATION


def test_boundary_is_the_exact_instant():
    midnight = datetime(2026, 10, 18, tzinfo=timezone.utc)
    record = visitor(expiry=date(2026, 10, 18))

    assert evaluate(record, midnight) == AccessDecision.AUTHORIZED
    assert evaluate(record, midnight + timedelta(microseconds=1)) == AccessDecision.EXPIRED_AUTHORIZATION


def test_expiry_uses_local_timezone():
    # 05:00 UTC is still the 17th in Costa Rica (UTC-6)
    now = datetime(2026, 10, 18, 5, 0, tzinfo=timezone.utc)
    record = visitor(expiry=date(2026, 10, 18))

    assert evaluate(record, now, "America/Costa_Rica") == AccessDecision.AUTHORIZED
    assert evaluate(record, now, "UTC") == AccessDecision.EXPIRED_AUTHORIZATION


def test_naive_now_is_treated_as_utc():
    naive = NOW.replace(tzinfo=None)
    assert evaluate(visitor(expiry=date(2026, 10, 18)), naive) == AccessDecision.EXPIRED_AUTHORIZATION
    assert is_expired(date(2026, 10, 19), naive, "UTC") is False


def test_expiry_instant_is_local_midnight():
    instant = expiry_instant(date(2026, 10, 18), "America/Costa_Rica")
    assert instant.astimezone(timezone.utc) == datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)


def test_earliest_valid_expiry():
    assert earliest_valid_expiry(NOW, "UTC") == date(2026, 10, 19)
    assert earliest_valid_expiry(datetime(2026, 10, 18, tzinfo=timezone.utc), "UTC") == date(2026, 10, 18)
    # Local date in Costa Rica is still the 17th
    assert earliest_valid_expiry(datetime(2026, 10, 18, 5, 0, tzinfo=timezone.utc), "America/Costa_Rica") == date(2026, 10, 18)
