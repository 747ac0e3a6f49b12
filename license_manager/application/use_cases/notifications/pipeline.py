"""End-to-end expiration notification run: select, resolve, aggregate, send."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo

import anyio.to_thread
from sqlalchemy.orm import Session, sessionmaker

from license_manager.config import Settings
from license_manager.domain.entities import (
    DigestRequest,
    ExpiringLicense,
    License,
    NotificationRunSummary,
    NotificationScope,
    Recipient,
    TestNotificationResult,
)
from license_manager.domain.errors import RecipientNotFoundError, UserNotFoundError
from license_manager.infrastructure.email import EmailDeliveryError, EmailTransport
from license_manager.infrastructure.repositories import UserRepository
from license_manager.utils import resolve_timezone, today_in_timezone

from .delivery import mark_licenses_notified, send_digest
from .digest import aggregate_digests
from .expiring_licenses import select_expiring_licenses
from .recipients import RecipientResolver, resolve_recipient

logger = logging.getLogger(__name__)

TEST_LICENSE_DAYS = 7


@dataclass(frozen=True)
class DeliveryOptions:
    """Static inputs of every pipeline run."""

    sender: str
    timezone: tzinfo
    sender_name: str | None = None
    app_name: str = "License Management System"
    admin_email: str | None = None
    skip_notified: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeliveryOptions":
        if not settings.sender_address:
            raise ValueError("A sender address is required to deliver notifications")
        return cls(
            sender=settings.sender_address,
            timezone=resolve_timezone(settings.app_timezone),
            sender_name=settings.email_from_name,
            app_name=settings.app_name,
            admin_email=settings.admin_email,
            skip_notified=settings.skip_notified_licenses,
        )


class ExpirationNotifier:
    """Run the notification pipeline for one or more scopes.

    Database work happens in a worker thread with a session of its own, so
    concurrent runs for different users share nothing but the connection pool.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        transport: EmailTransport,
        options: DeliveryOptions,
        *,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._transport = transport
        self.options = options
        self._today = today or (lambda: today_in_timezone(options.timezone))

    async def process(self, scope: NotificationScope) -> NotificationRunSummary:
        """Run the pipeline for a single scope."""

        return await self.process_many([scope])

    async def process_many(self, scopes: Iterable[NotificationScope]) -> NotificationRunSummary:
        """Run the pipeline for ``scopes`` with one digest per recipient overall."""

        scopes = list(scopes)
        summary = NotificationRunSummary()
        digests = await anyio.to_thread.run_sync(self._prepare_digests, scopes, summary)

        for digest in digests.values():
            address = digest.recipient.address
            try:
                message_id = await send_digest(
                    self._transport,
                    digest,
                    sender=self.options.sender,
                    sender_name=self.options.sender_name,
                    app_name=self.options.app_name,
                )
            except EmailDeliveryError as exc:
                summary.failed += 1
                summary.failed_recipients.append(address)
                logger.error(
                    "Failed to send expiration digest to %s (%s): %s", address, exc.reason, exc
                )
                continue

            summary.sent += 1
            logger.info(
                "Sent expiration digest with %d license(s) to %s (%s)",
                len(digest.items),
                address,
                message_id,
            )
            summary.marked += await anyio.to_thread.run_sync(
                self._mark_notified, digest.license_ids
            )

        logger.info(
            "Notification run finished: selected=%d skipped=%d digests=%d sent=%d failed=%d",
            summary.selected,
            summary.skipped,
            summary.digests,
            summary.sent,
            summary.failed,
        )
        return summary

    async def send_test_notification(self, user_id: int) -> TestNotificationResult:
        """Send a digest for one synthetic license to ``user_id``'s recipient."""

        recipient = await anyio.to_thread.run_sync(self._resolve_test_recipient, user_id)
        today = self._today()
        license = License(
            id=None,
            name="Test License",
            expiration_date=today + timedelta(days=TEST_LICENSE_DAYS),
            vendor_name="Test Vendor",
            customer_name="Test Customer",
        )
        digest = DigestRequest(
            recipient=recipient,
            items=[ExpiringLicense(license=license, days_until_expiry=TEST_LICENSE_DAYS)],
        )
        message_id = await send_digest(
            self._transport,
            digest,
            sender=self.options.sender,
            sender_name=self.options.sender_name,
            app_name=self.options.app_name,
        )
        logger.info("Test notification sent to %s for user %s", recipient.address, user_id)
        return TestNotificationResult(recipient=recipient.address, message_id=message_id)

    def _prepare_digests(
        self, scopes: list[NotificationScope], summary: NotificationRunSummary
    ) -> dict[str, DigestRequest]:
        today = self._today()
        with self._session_factory() as session:
            resolver = RecipientResolver(session, fallback_address=self.options.admin_email)
            entries: list[tuple[ExpiringLicense, Recipient | None]] = []
            for scope in scopes:
                items = select_expiring_licenses(
                    session,
                    days_ahead=scope.days_ahead,
                    include_inactive=scope.include_inactive,
                    today=today,
                    skip_notified=self.options.skip_notified,
                )
                logger.info(
                    "Found %d expiring license(s) within %d days for user %s",
                    len(items),
                    scope.days_ahead,
                    scope.user_id if scope.user_id is not None else "<admin>",
                )
                summary.selected += len(items)
                for item in items:
                    recipient = resolver.resolve(item.license, scope.user_id)
                    if recipient is None:
                        summary.skipped += 1
                    entries.append((item, recipient))

        digests = aggregate_digests(entries)
        summary.digests = len(digests)
        return digests

    def _mark_notified(self, license_ids: list[int]) -> int:
        if not license_ids:
            return 0
        with self._session_factory() as session:
            return mark_licenses_notified(session, license_ids)

    def _resolve_test_recipient(self, user_id: int) -> Recipient:
        with self._session_factory() as session:
            if UserRepository(session).get(user_id) is None:
                raise UserNotFoundError(f"User {user_id} not found")
            recipient = resolve_recipient(session, None, user_id, fallback_address=None)
        if recipient is None:
            raise RecipientNotFoundError(
                "No email address found for your user account. "
                "Please update your profile or notification settings with a valid email address."
            )
        return recipient


__all__ = ["DeliveryOptions", "ExpirationNotifier", "TEST_LICENSE_DAYS"]
