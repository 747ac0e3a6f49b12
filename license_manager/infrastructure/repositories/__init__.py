"""Repository implementations for infrastructure layer."""

from .license_repository import LicenseRepository
from .notification_settings_repository import NotificationSettingsRepository
from .user_repository import UserRepository

__all__ = [
    "LicenseRepository",
    "NotificationSettingsRepository",
    "UserRepository",
]
