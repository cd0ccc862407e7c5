"""
Tests for local date-key and time helpers.
"""

from datetime import date, datetime, timezone

import pytest

from tablebook.core.clock import FixedClock
from tablebook.core.errors import ValidationError
from tablebook.utils.dates import (
    compare_date_keys,
    current_time,
    date_key_after,
    format_date_key,
    format_display_date,
    is_future_datetime,
    is_past_date,
    is_today,
    parse_date_key,
    today_key,
    tomorrow_key,
    validate_time,
)


def test_format_date_key_pads_fields():
    assert format_date_key(date(2025, 3, 7)) == "2025-03-07"
    assert format_date_key(None) == ""


def test_today_key_uses_local_calendar_not_utc():
    """00:30 in Seoul is still the previous day in UTC."""
    clock = FixedClock(datetime(2025, 5, 31, 15, 30, tzinfo=timezone.utc))
    assert today_key(clock) == "2025-06-01"
    assert current_time(clock) == "00:30"


def test_aware_datetime_converted_before_formatting(clock):
    utc_evening = datetime(2025, 5, 31, 20, 0, tzinfo=timezone.utc)
    assert format_date_key(utc_evening) == "2025-05-31"
    assert format_date_key(utc_evening, clock.tz) == "2025-06-01"


def test_tomorrow_and_offsets_cross_month_end():
    clock = FixedClock(datetime(2025, 6, 30, 23, 59))
    assert tomorrow_key(clock) == "2025-07-01"
    assert date_key_after(clock, 14) == "2025-07-14"


@pytest.mark.parametrize("bad", ["2025-6-1", "2025/06/01", "2025-02-30", "", "tomorrow"])
def test_parse_date_key_rejects_malformed(bad):
    with pytest.raises(ValidationError):
        parse_date_key(bad)


@pytest.mark.parametrize("bad", ["7:00", "24:00", "18:60", "1800"])
def test_validate_time_rejects_malformed(bad):
    with pytest.raises(ValidationError):
        validate_time(bad)


def test_display_date_korean_and_english():
    assert format_display_date("2025-06-01") == "2025년 6월 1일 (일)"
    assert format_display_date("2025-06-01", locale="en") == "Sunday, June 1, 2025"


def test_today_and_past_checks(clock):
    assert is_today("2025-06-01", clock)
    assert not is_today("2025-06-02", clock)
    assert is_past_date("2025-05-31", clock)
    assert not is_past_date("2025-06-01", clock)


def test_compare_date_keys():
    assert compare_date_keys("2025-06-01", "2025-06-02") == -1
    assert compare_date_keys("2025-12-31", "2025-06-02") == 1
    assert compare_date_keys("2025-06-01", "2025-06-01") == 0


def test_is_future_datetime(clock):
    assert is_future_datetime("2025-06-01", "18:30", clock)
    assert not is_future_datetime("2025-06-01", "17:30", clock)
    assert not is_future_datetime("2025-06-01", "18:00", clock)


@pytest.mark.parametrize(
    "day",
    [date(2025, 3, 9), date(2025, 11, 2), date(2024, 12, 31), date(2025, 1, 1), date(2024, 2, 29)],
)
def test_date_key_round_trip(day):
    assert parse_date_key(format_date_key(day)) == day


@pytest.mark.parametrize(
    "local,utc_instant,expected",
    [
        # Spring forward: 00:30 EST is 05:30 UTC, 23:30 the night before is 04:30 UTC
        (datetime(2025, 3, 9, 0, 30), datetime(2025, 3, 9, 4, 30, tzinfo=timezone.utc), "2025-03-08"),
        # Fall back: 00:30 EDT is 04:30 UTC
        (datetime(2025, 11, 2, 0, 30), datetime(2025, 11, 2, 3, 30, tzinfo=timezone.utc), "2025-11-01"),
    ],
)
def test_date_key_round_trip_across_dst(local, utc_instant, expected):
    clock = FixedClock(local, "America/New_York")
    now = clock.now()

    assert today_key(clock) == format_date_key(local.date())
    assert format_date_key(now, clock.tz) == today_key(clock)
    assert parse_date_key(format_date_key(now, clock.tz)) == local.date()
    # The UTC calendar day is already the next one; the local key is not
    assert utc_instant.date() == local.date()
    assert format_date_key(utc_instant, clock.tz) == expected
