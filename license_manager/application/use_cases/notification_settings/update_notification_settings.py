"""Use case for saving a user's notification settings."""

import logging
from datetime import time

from sqlalchemy.orm import Session

from license_manager.domain.entities import NotificationSettings
from license_manager.domain.errors import UserNotFoundError
from license_manager.infrastructure.repositories import (
    NotificationSettingsRepository,
    UserRepository,
)

from .validators import ensure_valid_days, ensure_valid_time, normalize_email_address

logger = logging.getLogger(__name__)


def update_notification_settings(
    session: Session,
    *,
    user_id: int,
    days_before_expiration: int,
    notification_time: str | time,
    send_to_email: bool = True,
    email_address: str | None = None,
    include_inactive: bool = False,
) -> NotificationSettings:
    """Validate and upsert the settings row of ``user_id``.

    The caller is responsible for refreshing the user's schedule afterwards.
    """

    days = ensure_valid_days(days_before_expiration)
    fire_time = ensure_valid_time(notification_time)
    address = normalize_email_address(email_address)

    if UserRepository(session).get(user_id) is None:
        raise UserNotFoundError(f"User {user_id} not found")

    repository = NotificationSettingsRepository(session)
    current = repository.get_for_user(user_id) or NotificationSettings.defaults_for(user_id)
    current.days_before_expiration = days
    current.notification_time = fire_time
    current.send_to_email = bool(send_to_email)
    current.email_address = address
    current.include_inactive = bool(include_inactive)

    saved = repository.save(current)
    logger.info(
        "Notification settings saved for user %s (days=%s time=%s email=%s)",
        user_id,
        saved.days_before_expiration,
        saved.notification_time.strftime("%H:%M"),
        saved.send_to_email,
    )
    return saved
