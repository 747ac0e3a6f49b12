"""Send digests and record which licenses were notified."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_manager.domain.entities import DigestRequest
from license_manager.infrastructure.email import EmailTransport
from license_manager.infrastructure.repositories import LicenseRepository

from .digest import compose_digest_email

logger = logging.getLogger(__name__)


async def send_digest(
    transport: EmailTransport,
    digest: DigestRequest,
    *,
    sender: str,
    sender_name: str | None = None,
    app_name: str = "License Management System",
) -> str:
    """Compose and deliver ``digest``; return the transport's message id.

    Transport failures propagate as :class:`EmailDeliveryError` subclasses.
    """

    message = compose_digest_email(
        digest, sender=sender, sender_name=sender_name, app_name=app_name
    )
    return await transport.send(message)


def mark_licenses_notified(session: Session, license_ids: Iterable[int]) -> int:
    """Flag each license as notified; return how many rows were updated.

    Every license is updated independently so one failure neither rolls back
    the others nor the email that was already sent.
    """

    repository = LicenseRepository(session)
    marked = 0
    for license_id in license_ids:
        try:
            if repository.mark_notified(license_id):
                marked += 1
            else:
                logger.warning("License %s disappeared before it could be marked", license_id)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to mark license %s as notified", license_id)
    return marked


__all__ = ["mark_licenses_notified", "send_digest"]
