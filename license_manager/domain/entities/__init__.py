"""Domain entities exposed by the application."""

from .digest import (
    RECIPIENT_SOURCE_ADMIN,
    RECIPIENT_SOURCE_LOGIN,
    RECIPIENT_SOURCE_SETTINGS,
    DigestRequest,
    NotificationRunSummary,
    Recipient,
    TestNotificationResult,
    normalize_address,
)
from .license import ExpiringLicense, License, days_until
from .notification_settings import (
    DEFAULT_DAYS_BEFORE_EXPIRATION,
    DEFAULT_NOTIFICATION_TIME,
    MAX_DAYS_BEFORE_EXPIRATION,
    MIN_DAYS_BEFORE_EXPIRATION,
    NotificationScope,
    NotificationSettings,
)
from .user import User

__all__ = [
    "DEFAULT_DAYS_BEFORE_EXPIRATION",
    "DEFAULT_NOTIFICATION_TIME",
    "DigestRequest",
    "ExpiringLicense",
    "License",
    "MAX_DAYS_BEFORE_EXPIRATION",
    "MIN_DAYS_BEFORE_EXPIRATION",
    "NotificationRunSummary",
    "NotificationScope",
    "NotificationSettings",
    "RECIPIENT_SOURCE_ADMIN",
    "RECIPIENT_SOURCE_LOGIN",
    "RECIPIENT_SOURCE_SETTINGS",
    "Recipient",
    "TestNotificationResult",
    "User",
    "days_until",
    "normalize_address",
]
