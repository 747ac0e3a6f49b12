"""Select licenses that are expired or about to expire."""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from license_manager.domain.entities import ExpiringLicense, days_until
from license_manager.infrastructure.repositories import LicenseRepository


def select_expiring_licenses(
    session: Session,
    *,
    days_ahead: int,
    include_inactive: bool,
    today: date,
    skip_notified: bool = False,
) -> list[ExpiringLicense]:
    """Return licenses expiring within ``days_ahead`` days, including expired ones.

    Items are ordered by urgency: expired licenses first (the most recently
    expired leading), then the ones expiring soonest.
    """

    if days_ahead < 0:
        raise ValueError("days_ahead must be zero or positive")

    licenses = LicenseRepository(session).list_expiring(
        today=today,
        days_ahead=days_ahead,
        include_inactive=include_inactive,
        skip_notified=skip_notified,
    )
    items = [
        ExpiringLicense(license=license, days_until_expiry=days_until(license.expiration_date, today))
        for license in licenses
        if license.expiration_date is not None
    ]
    items.sort(key=lambda item: item.urgency_key)
    return items


__all__ = ["select_expiring_licenses"]
