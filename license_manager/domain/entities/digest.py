"""Domain entities describing expiration digests and run outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field

from .license import ExpiringLicense

RECIPIENT_SOURCE_SETTINGS = "settings"
RECIPIENT_SOURCE_LOGIN = "login"
RECIPIENT_SOURCE_ADMIN = "admin"


@dataclass(frozen=True)
class Recipient:
    """Resolved destination of a digest."""

    address: str
    user_id: int | None = None
    source: str = RECIPIENT_SOURCE_SETTINGS

    @property
    def key(self) -> str:
        """Normalized address used to group digests."""

        return normalize_address(self.address)


@dataclass
class DigestRequest:
    """Every expiring license destined for one recipient."""

    recipient: Recipient
    items: list[ExpiringLicense] = field(default_factory=list)

    @property
    def expired(self) -> list[ExpiringLicense]:
        return [item for item in self.items if item.is_expired]

    @property
    def expiring_soon(self) -> list[ExpiringLicense]:
        return [item for item in self.items if not item.is_expired]

    @property
    def license_ids(self) -> list[int]:
        return [item.license.id for item in self.items if item.license.id is not None]

    def sort(self) -> None:
        """Order items so the most urgent render first."""

        self.items.sort(key=lambda item: item.urgency_key)


@dataclass
class NotificationRunSummary:
    """Counters describing the outcome of one pipeline run."""

    selected: int = 0
    skipped: int = 0
    digests: int = 0
    sent: int = 0
    failed: int = 0
    marked: int = 0
    failed_recipients: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TestNotificationResult:
    """Outcome of a smoke-test email."""

    recipient: str
    message_id: str


def normalize_address(address: str) -> str:
    return address.strip().lower()


__all__ = [
    "DigestRequest",
    "NotificationRunSummary",
    "RECIPIENT_SOURCE_ADMIN",
    "RECIPIENT_SOURCE_LOGIN",
    "RECIPIENT_SOURCE_SETTINGS",
    "Recipient",
    "TestNotificationResult",
    "normalize_address",
]
