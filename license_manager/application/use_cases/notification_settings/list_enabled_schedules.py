"""Use cases listing the settings that should own a timer."""

from sqlalchemy.orm import Session

from license_manager.domain.entities import NotificationSettings
from license_manager.infrastructure.repositories import NotificationSettingsRepository


def list_enabled_schedules(session: Session) -> list[NotificationSettings]:
    """Return settings of active users who opted into email notifications."""

    return [settings for _, settings in NotificationSettingsRepository(session).list_enabled()]


def get_enabled_schedule(session: Session, user_id: int) -> NotificationSettings | None:
    """Return ``user_id``'s settings when they should be scheduled, else ``None``."""

    found = NotificationSettingsRepository(session).get_with_user(user_id)
    if found is None:
        return None
    user, settings = found
    if settings is None or not settings.send_to_email or not user.is_active:
        return None
    return settings
