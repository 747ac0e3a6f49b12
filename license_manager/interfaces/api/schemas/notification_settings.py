"""Pydantic models describing notification settings payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from license_manager.domain.entities import (
    DEFAULT_DAYS_BEFORE_EXPIRATION,
    NotificationSettings,
)
from license_manager.utils import format_time_of_day


class NotificationSettingsRead(BaseModel):
    """Effective notification settings of the authenticated user."""

    user_id: int
    days_before_expiration: int
    send_to_email: bool
    notification_time: str = Field(..., description="Local fire time as HH:MM")
    email_address: str | None = None
    include_inactive: bool
    is_default: bool = Field(
        ..., description="True when the user never saved settings and defaults apply"
    )
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, settings: NotificationSettings) -> "NotificationSettingsRead":
        return cls(
            user_id=settings.user_id,
            days_before_expiration=settings.days_before_expiration,
            send_to_email=settings.send_to_email,
            notification_time=format_time_of_day(settings.notification_time),
            email_address=settings.email_address,
            include_inactive=settings.include_inactive,
            is_default=not settings.is_persisted,
            updated_at=settings.updated_at,
        )


class NotificationSettingsUpdate(BaseModel):
    """Payload used to save notification settings."""

    days_before_expiration: int = DEFAULT_DAYS_BEFORE_EXPIRATION
    send_to_email: bool = True
    notification_time: str = "09:00"
    email_address: str | None = None
    include_inactive: bool = False


class NotificationSettingsSaved(NotificationSettingsRead):
    """Saved settings plus the resulting schedule state."""

    scheduled: bool
    next_run_at: datetime | None = None


class ScheduleRefreshResponse(BaseModel):
    user_id: int
    scheduled: bool
    next_run_at: datetime | None = None


class TestNotificationResponse(BaseModel):
    """Outcome of a test email."""

    success: bool = True
    message: str
    recipient: str
    message_id: str


class ErrorDetail(BaseModel):
    """Structured ``detail`` of error responses."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail


__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "NotificationSettingsRead",
    "NotificationSettingsSaved",
    "NotificationSettingsUpdate",
    "ScheduleRefreshResponse",
    "TestNotificationResponse",
]
