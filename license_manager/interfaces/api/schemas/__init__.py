"""Pydantic schemas exposed by the API."""

from .notification_settings import (
    ErrorDetail,
    ErrorResponse,
    NotificationSettingsRead,
    NotificationSettingsSaved,
    NotificationSettingsUpdate,
    ScheduleRefreshResponse,
    TestNotificationResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "NotificationSettingsRead",
    "NotificationSettingsSaved",
    "NotificationSettingsUpdate",
    "ScheduleRefreshResponse",
    "TestNotificationResponse",
]
