"""Domain entities describing licenses and their expiration status."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass
class License:
    """A software license sold by a vendor to a customer."""

    id: int | None
    name: str
    expiration_date: date | None
    vendor_id: int | None = None
    customer_id: int | None = None
    vendor_name: str | None = None
    customer_name: str | None = None
    license_key: str | None = None
    license_type: str | None = None
    cost: Decimal | None = None
    currency: str | None = None
    is_active: bool = True
    notification_sent: bool = False
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ExpiringLicense:
    """A license paired with the number of days left before it expires."""

    license: License
    days_until_expiry: int

    @property
    def is_expired(self) -> bool:
        return self.days_until_expiry < 0

    @property
    def urgency_key(self) -> tuple[int, int]:
        """Sort key placing expired items first, most recently expired first."""

        return (0 if self.is_expired else 1, abs(self.days_until_expiry))

    @property
    def status_label(self) -> str:
        """Human readable description such as ``Expired 2 days ago``."""

        days = self.days_until_expiry
        if days < 0:
            overdue = -days
            return f"Expired {overdue} day{'s' if overdue != 1 else ''} ago"
        if days == 0:
            return "Expires today"
        return f"Expires in {days} day{'s' if days != 1 else ''}"


def days_until(expiration_date: date, today: date) -> int:
    """Return whole days from ``today`` until ``expiration_date`` (negative if past)."""

    return (expiration_date - today).days


__all__ = ["License", "ExpiringLicense", "days_until"]
