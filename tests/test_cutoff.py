from datetime import date, datetime, timezone

import pytest

from kitchen.config import ConfigError, Settings, parse_hhmm, validate_settings
from kitchen.services.cutoff import is_locked, is_past, local_today

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize("hh, mm, ss, locked", [
    (9, 0, 0, False),
    (12, 29, 0, False),
    (12, 29, 59, False),
    (12, 30, 0, True),
    (18, 45, 0, True),
])
def test_cutoff_on_today(hh, mm, ss, locked):
    now = datetime(2026, 10, 19, hh, mm, ss)
    assert is_locked(TODAY, now=now) is locked


def test_cutoff_ignores_other_dates():
    now = datetime(2026, 10, 19, 12, 30)
    assert is_locked(date(2026, 10, 20), now=now) is False
    assert is_locked(date(2026, 10, 18), now=now) is False


def test_cutoff_compares_in_local_time():
    # 07:00 UTC == 12:30 Asia/Kolkata
    assert is_locked(TODAY, now=datetime(2026, 10, 19, 7, 0, tzinfo=timezone.utc)) is True
    assert is_locked(TODAY, now=datetime(2026, 10, 19, 6, 59, tzinfo=timezone.utc)) is False


def test_cutoff_is_configurable():
    s = Settings(CUTOFF="11:00")
    assert is_locked(TODAY, now=datetime(2026, 10, 19, 11, 0), settings=s) is True


def test_clock_is_read_per_call():
    # no `now`: both calls must agree with the real clock, not a cached one
    today = local_today()
    assert is_past(today) is False
    assert is_locked(date(today.year + 1, 1, 1)) is False


def test_past_dates():
    now = datetime(2026, 10, 19, 8, 0)
    assert is_past(date(2026, 10, 18), now=now) is True
    assert is_past(TODAY, now=now) is False


def test_parse_hhmm_rejects_garbage():
    assert parse_hhmm("07:05").minute == 5
    with pytest.raises(ConfigError):
        parse_hhmm("noon")


def test_missing_keys_fail_fast():
    s = Settings(DATABASE_URL="sqlite://", VAPID_PUBLIC_KEY="", VAPID_PRIVATE_KEY="x")
    with pytest.raises(ConfigError, match="VAPID_PUBLIC_KEY"):
        validate_settings(s)


def test_unknown_timezone_fails_fast():
    s = Settings(DATABASE_URL="sqlite://", VAPID_PUBLIC_KEY="a", VAPID_PRIVATE_KEY="b", TIMEZONE="Mars/Olympus")
    with pytest.raises(ConfigError):
        validate_settings(s)
