"""Endpoints managing the authenticated user's notification settings."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

import anyio.to_thread
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from license_manager.application.use_cases.notification_settings import (
    get_notification_settings,
    update_notification_settings,
)
from license_manager.application.use_cases.notifications import ExpirationNotifier
from license_manager.domain.entities import User
from license_manager.domain.errors import (
    InvalidNotificationSettingsError,
    RecipientNotFoundError,
    UserNotFoundError,
)
from license_manager.infrastructure.email import (
    EmailAuthenticationError,
    EmailDeliveryError,
    EmailTimeoutError,
)
from license_manager.infrastructure.scheduling import NotificationScheduler
from license_manager.interfaces.api.dependencies import (
    get_current_active_user,
    get_db,
    get_notifier,
    get_scheduler,
)
from license_manager.interfaces.api.schemas import (
    ErrorResponse,
    NotificationSettingsRead,
    NotificationSettingsSaved,
    NotificationSettingsUpdate,
    ScheduleRefreshResponse,
    TestNotificationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings/notifications", tags=["notification-settings"])


def _error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    return {code: {"model": ErrorResponse} for code in status_codes}


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


async def _refresh_schedule(
    scheduler: NotificationScheduler | None, user_id: int
) -> ScheduleRefreshResponse:
    if scheduler is None:
        return ScheduleRefreshResponse(user_id=user_id, scheduled=False)
    scheduled = await scheduler.refresh_user(user_id)
    return ScheduleRefreshResponse(
        user_id=user_id,
        scheduled=scheduled,
        next_run_at=scheduler.next_run_at(user_id),
    )


@router.get("", response_model=NotificationSettingsRead, responses=_error_responses(404))
def read_notification_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationSettingsRead:
    """Return the stored settings, or the defaults when none were saved."""

    try:
        settings = get_notification_settings(db, current_user.id)
    except UserNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "user_not_found", str(exc)) from exc
    return NotificationSettingsRead.from_entity(settings)


@router.put(
    "", response_model=NotificationSettingsSaved, responses=_error_responses(400, 404)
)
async def save_notification_settings(
    payload: NotificationSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    scheduler: NotificationScheduler | None = Depends(get_scheduler),
) -> NotificationSettingsSaved:
    """Save the settings and reinstall the user's daily timer."""

    try:
        saved = await anyio.to_thread.run_sync(
            partial(
                update_notification_settings,
                db,
                user_id=current_user.id,
                days_before_expiration=payload.days_before_expiration,
                notification_time=payload.notification_time,
                send_to_email=payload.send_to_email,
                email_address=payload.email_address,
                include_inactive=payload.include_inactive,
            )
        )
    except InvalidNotificationSettingsError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "invalid_settings", str(exc)) from exc
    except UserNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "user_not_found", str(exc)) from exc

    refreshed = await _refresh_schedule(scheduler, current_user.id)
    return NotificationSettingsSaved(
        **NotificationSettingsRead.from_entity(saved).model_dump(),
        scheduled=refreshed.scheduled,
        next_run_at=refreshed.next_run_at,
    )


@router.post("/refresh", response_model=ScheduleRefreshResponse)
async def refresh_notification_schedule(
    current_user: User = Depends(get_current_active_user),
    scheduler: NotificationScheduler | None = Depends(get_scheduler),
) -> ScheduleRefreshResponse:
    """Reload the user's settings into the scheduler."""

    return await _refresh_schedule(scheduler, current_user.id)


@router.post(
    "/test",
    response_model=TestNotificationResponse,
    responses=_error_responses(400, 404, 502, 503, 504),
)
async def send_test_notification(
    current_user: User = Depends(get_current_active_user),
    notifier: ExpirationNotifier = Depends(get_notifier),
) -> TestNotificationResponse:
    """Send a sample expiration email to the user's notification address."""

    try:
        result = await notifier.send_test_notification(current_user.id)
    except RecipientNotFoundError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "no_recipient", str(exc)) from exc
    except UserNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "user_not_found", str(exc)) from exc
    except EmailAuthenticationError as exc:
        logger.error("Test email for user %s rejected credentials: %s", current_user.id, exc)
        raise _error(
            status.HTTP_502_BAD_GATEWAY,
            "invalid_credentials",
            "Email authentication failed. Please check the email credentials "
            "in the server configuration.",
        ) from exc
    except EmailTimeoutError as exc:
        logger.error("Test email for user %s timed out: %s", current_user.id, exc)
        raise _error(
            status.HTTP_504_GATEWAY_TIMEOUT,
            "timeout",
            "Email server connection timeout. Please check the network connection.",
        ) from exc
    except EmailDeliveryError as exc:
        logger.error("Test email for user %s failed: %s", current_user.id, exc)
        raise _error(
            status.HTTP_502_BAD_GATEWAY,
            "delivery_failed",
            f"Failed to send test email: {exc}",
        ) from exc

    return TestNotificationResponse(
        message=f"Test email sent successfully to {result.recipient}",
        recipient=result.recipient,
        message_id=result.message_id,
    )
