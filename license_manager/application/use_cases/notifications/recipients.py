"""Decide which mailbox receives the notification for a license."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from license_manager.domain.entities import (
    RECIPIENT_SOURCE_ADMIN,
    RECIPIENT_SOURCE_LOGIN,
    RECIPIENT_SOURCE_SETTINGS,
    License,
    Recipient,
)
from license_manager.infrastructure.repositories import NotificationSettingsRepository

logger = logging.getLogger(__name__)


def resolve_recipient(
    session: Session,
    license: License | None,
    user_id: int | None,
    *,
    fallback_address: str | None,
) -> Recipient | None:
    """Return the recipient for ``license`` or ``None`` when nothing resolves.

    Without ``user_id`` the process-wide admin address is used. With a user the
    settings override wins, then the user's login email.
    """

    if user_id is None:
        if fallback_address:
            return Recipient(address=fallback_address, source=RECIPIENT_SOURCE_ADMIN)
        logger.warning(
            "No admin address configured; skipping license %s",
            license.id if license else None,
        )
        return None

    found = NotificationSettingsRepository(session).get_with_user(user_id)
    if found is None:
        logger.warning(
            "User %s not found; skipping license %s",
            user_id,
            license.id if license else None,
        )
        return None

    user, settings = found
    if settings is not None and settings.email_address:
        return Recipient(
            address=settings.email_address,
            user_id=user_id,
            source=RECIPIENT_SOURCE_SETTINGS,
        )
    if user.email:
        return Recipient(address=user.email, user_id=user_id, source=RECIPIENT_SOURCE_LOGIN)

    logger.warning(
        "User %s has no notification or login email; skipping license %s",
        user_id,
        license.id if license else None,
    )
    return None


class RecipientResolver:
    """Memoize :func:`resolve_recipient` per user for the length of one run."""

    def __init__(self, session: Session, *, fallback_address: str | None) -> None:
        self.session = session
        self.fallback_address = fallback_address
        self._cache: dict[int | None, Recipient | None] = {}

    def resolve(self, license: License, user_id: int | None) -> Recipient | None:
        if user_id not in self._cache:
            self._cache[user_id] = resolve_recipient(
                self.session, license, user_id, fallback_address=self.fallback_address
            )
        return self._cache[user_id]


__all__ = ["RecipientResolver", "resolve_recipient"]
