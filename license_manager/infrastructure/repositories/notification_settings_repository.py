"""Persistence helpers for notification settings."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from license_manager.domain.entities import NotificationSettings, User
from license_manager.infrastructure.models import NotificationSettingsModel, UserModel

from .user_repository import UserRepository


class NotificationSettingsRepository:
    """Provide access to the ``user_notification_settings`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_for_user(self, user_id: int) -> NotificationSettings | None:
        model = self._get_model(user_id)
        return self._to_entity(model) if model else None

    def get_with_user(
        self, user_id: int
    ) -> tuple[User, NotificationSettings | None] | None:
        """Return the user and its settings row (``None`` when absent)."""

        row = (
            self.session.query(UserModel, NotificationSettingsModel)
            .outerjoin(
                NotificationSettingsModel,
                NotificationSettingsModel.user_id == UserModel.id,
            )
            .filter(UserModel.id == user_id)
            .first()
        )
        if row is None:
            return None
        user_model, settings_model = row
        settings = self._to_entity(settings_model) if settings_model else None
        return UserRepository._to_entity(user_model), settings

    def list_enabled(self) -> Sequence[tuple[User, NotificationSettings]]:
        """Return active users whose settings enable email notifications."""

        query = (
            self.session.query(UserModel, NotificationSettingsModel)
            .join(
                NotificationSettingsModel,
                NotificationSettingsModel.user_id == UserModel.id,
            )
            .filter(NotificationSettingsModel.send_to_email.is_(True))
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id.asc())
        )
        return [
            (UserRepository._to_entity(user_model), self._to_entity(settings_model))
            for user_model, settings_model in query.all()
        ]

    def save(self, settings: NotificationSettings) -> NotificationSettings:
        """Insert or update the single settings row of ``settings.user_id``."""

        model = self._get_model(settings.user_id)
        if model is None:
            model = NotificationSettingsModel(user_id=settings.user_id)
        model.days_before_expiration = settings.days_before_expiration
        model.send_to_email = settings.send_to_email
        model.notification_time = settings.notification_time
        model.email_address = settings.email_address
        model.include_inactive = settings.include_inactive
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _get_model(self, user_id: int) -> NotificationSettingsModel | None:
        return (
            self.session.query(NotificationSettingsModel)
            .filter(NotificationSettingsModel.user_id == user_id)
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationSettingsModel) -> NotificationSettings:
        return NotificationSettings(
            id=model.id,
            user_id=model.user_id,
            days_before_expiration=model.days_before_expiration,
            send_to_email=bool(model.send_to_email),
            notification_time=model.notification_time,
            email_address=model.email_address or None,
            include_inactive=bool(model.include_inactive),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["NotificationSettingsRepository"]
