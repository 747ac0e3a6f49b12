"""Use case returning the effective notification settings of a user."""

from sqlalchemy.orm import Session

from license_manager.domain.entities import NotificationSettings
from license_manager.domain.errors import UserNotFoundError
from license_manager.infrastructure.repositories import NotificationSettingsRepository


def get_notification_settings(session: Session, user_id: int) -> NotificationSettings:
    """Return the stored settings or the defaults when the user saved none."""

    found = NotificationSettingsRepository(session).get_with_user(user_id)
    if found is None:
        raise UserNotFoundError(f"User {user_id} not found")

    _, settings = found
    return settings or NotificationSettings.defaults_for(user_id)
