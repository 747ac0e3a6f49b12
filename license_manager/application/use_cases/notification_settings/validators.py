"""Validation helpers for notification settings use cases."""

import re
from datetime import time

from license_manager.domain.entities import (
    MAX_DAYS_BEFORE_EXPIRATION,
    MIN_DAYS_BEFORE_EXPIRATION,
)
from license_manager.domain.errors import InvalidNotificationSettingsError
from license_manager.utils import parse_time_of_day

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def ensure_valid_days(days: int) -> int:
    """Return ``days`` when it lies inside the accepted window."""

    if isinstance(days, bool) or not isinstance(days, int):
        raise InvalidNotificationSettingsError("Days before expiration must be a whole number")
    if not MIN_DAYS_BEFORE_EXPIRATION <= days <= MAX_DAYS_BEFORE_EXPIRATION:
        raise InvalidNotificationSettingsError(
            f"Days before expiration must be between {MIN_DAYS_BEFORE_EXPIRATION} "
            f"and {MAX_DAYS_BEFORE_EXPIRATION}"
        )
    return days


def ensure_valid_time(value: str | time) -> time:
    try:
        return parse_time_of_day(value)
    except ValueError as exc:
        raise InvalidNotificationSettingsError(str(exc)) from exc


def normalize_email_address(email: str | None) -> str | None:
    """Return a stripped override address, ``None`` when blank."""

    if email is None:
        return None
    normalized = email.strip()
    if not normalized:
        return None
    if not EMAIL_PATTERN.match(normalized):
        raise InvalidNotificationSettingsError("Invalid email address format")
    return normalized
