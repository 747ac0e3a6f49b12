"""Domain entity representing per-user notification preferences."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Final

DEFAULT_DAYS_BEFORE_EXPIRATION: Final[int] = 30
DEFAULT_NOTIFICATION_TIME: Final[time] = time(hour=9, minute=0)
MIN_DAYS_BEFORE_EXPIRATION: Final[int] = 1
MAX_DAYS_BEFORE_EXPIRATION: Final[int] = 365


@dataclass
class NotificationSettings:
    """Whether, when and where a user receives expiration emails."""

    id: int | None
    user_id: int
    days_before_expiration: int = DEFAULT_DAYS_BEFORE_EXPIRATION
    send_to_email: bool = True
    notification_time: time = DEFAULT_NOTIFICATION_TIME
    email_address: str | None = None
    include_inactive: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def defaults_for(cls, user_id: int) -> "NotificationSettings":
        """Return the settings used for a user who never saved any."""

        return cls(id=None, user_id=user_id)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


@dataclass(frozen=True)
class NotificationScope:
    """Parameters of one pipeline run."""

    days_ahead: int
    include_inactive: bool = False
    user_id: int | None = None


__all__ = [
    "DEFAULT_DAYS_BEFORE_EXPIRATION",
    "DEFAULT_NOTIFICATION_TIME",
    "MAX_DAYS_BEFORE_EXPIRATION",
    "MIN_DAYS_BEFORE_EXPIRATION",
    "NotificationScope",
    "NotificationSettings",
]
