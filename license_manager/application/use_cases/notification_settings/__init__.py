"""Use cases for managing per-user notification settings."""

from .get_notification_settings import get_notification_settings
from .list_enabled_schedules import get_enabled_schedule, list_enabled_schedules
from .update_notification_settings import update_notification_settings

__all__ = [
    "get_enabled_schedule",
    "get_notification_settings",
    "list_enabled_schedules",
    "update_notification_settings",
]
