"""Utility helpers for reusable functionality."""

from .datetime import (
    format_time_of_day,
    next_fire_time,
    parse_time_of_day,
    resolve_timezone,
    today_in_timezone,
)
from .logging import configure_logging

__all__ = [
    "configure_logging",
    "format_time_of_day",
    "next_fire_time",
    "parse_time_of_day",
    "resolve_timezone",
    "today_in_timezone",
]
