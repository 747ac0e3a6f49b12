"""Helpers for working with timezone-aware datetimes and times of day."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_DEFAULT_TIMEZONE: Final[str] = "Asia/Bangkok"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)
_TIME_OF_DAY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)(?::(?P<second>[0-5]\d))?$"
)


def today_in_timezone(tz: tzinfo) -> date:
    """Return the calendar date that is current in ``tz``."""

    return datetime.now(tz=tz).date()


def parse_time_of_day(value: str | time) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string into a :class:`time`."""

    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    match = _TIME_OF_DAY_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")
    return time(hour=int(match.group("hour")), minute=int(match.group("minute")))


def format_time_of_day(value: time) -> str:
    """Return ``value`` rendered as ``HH:MM``."""

    return f"{value.hour:02d}:{value.minute:02d}"


def next_fire_time(notification_time: time, now: datetime) -> datetime:
    """Return the next instant after ``now`` matching ``notification_time``.

    ``now`` must be timezone-aware; the result is expressed in the same timezone.
    A fire time equal to ``now`` is considered already passed.
    """

    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    tz = now.tzinfo
    candidate = datetime.combine(
        now.date(),
        time(hour=notification_time.hour, minute=notification_time.minute),
        tzinfo=tz,
    )
    if candidate.astimezone(timezone.utc) <= now.astimezone(timezone.utc):
        candidate = datetime.combine(
            now.date() + timedelta(days=1),
            time(hour=notification_time.hour, minute=notification_time.minute),
            tzinfo=tz,
        )
    return candidate


def resolve_timezone(tz_name: str | None) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    tz_name = (tz_name or "").strip() or _DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
