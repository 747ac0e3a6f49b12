"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from license_manager.domain.entities import User
from license_manager.infrastructure.models import UserModel


class UserRepository:
    """Read access to user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self.session.query(UserModel).filter(UserModel.email == email).first()
        return self._to_entity(model) if model else None

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            full_name=model.full_name,
            role=model.role or "user",
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["UserRepository"]
