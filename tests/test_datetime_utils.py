"""Tests for time-of-day parsing and fire time computation."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from license_manager.utils import (
    format_time_of_day,
    next_fire_time,
    parse_time_of_day,
    resolve_timezone,
)

BANGKOK = ZoneInfo("Asia/Bangkok")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("09:00", time(9, 0)), ("7:05", time(7, 5)), ("23:59:30", time(23, 59)), (" 18:00 ", time(18, 0))],
)
def test_parse_time_of_day(value, expected):
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize("value", ["24:00", "9", "09:60", "nine"])
def test_parse_time_of_day_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_format_time_of_day():
    assert format_time_of_day(time(9, 5)) == "09:05"


def test_next_fire_time_later_today():
    now = datetime(2024, 6, 15, 8, 0, tzinfo=BANGKOK)

    assert next_fire_time(time(9, 0), now) == datetime(2024, 6, 15, 9, 0, tzinfo=BANGKOK)


def test_next_fire_time_rolls_to_tomorrow_when_passed_or_now():
    passed = datetime(2024, 6, 15, 9, 30, tzinfo=BANGKOK)
    exact = datetime(2024, 6, 15, 9, 0, tzinfo=BANGKOK)

    assert next_fire_time(time(9, 0), passed) == datetime(2024, 6, 16, 9, 0, tzinfo=BANGKOK)
    assert next_fire_time(time(9, 0), exact) == datetime(2024, 6, 16, 9, 0, tzinfo=BANGKOK)


def test_next_fire_time_is_within_a_day():
    now = datetime(2024, 12, 31, 23, 59, tzinfo=BANGKOK)

    fire_at = next_fire_time(time(0, 0), now)

    assert fire_at == datetime(2025, 1, 1, 0, 0, tzinfo=BANGKOK)
    assert timedelta(0) < fire_at - now <= timedelta(days=1)


def test_next_fire_time_requires_aware_datetime():
    with pytest.raises(ValueError):
        next_fire_time(time(9, 0), datetime(2024, 6, 15, 8, 0))


def test_resolve_timezone_variants():
    assert resolve_timezone("Asia/Bangkok") == BANGKOK
    assert resolve_timezone("UTC+07:00") == timezone(timedelta(hours=7))
    assert resolve_timezone("Not/AZone") == BANGKOK
    assert resolve_timezone(None) == BANGKOK
