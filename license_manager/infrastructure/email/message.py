"""Transport-neutral email message and error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailMessage:
    """A rendered email ready to hand over to a transport."""

    sender: str
    recipient: str
    subject: str
    html_body: str
    text_body: str | None = None
    sender_name: str | None = None


class EmailTransport(Protocol):
    """Anything able to deliver an :class:`EmailMessage`."""

    async def send(self, message: EmailMessage) -> str:
        """Deliver ``message`` and return the message identifier."""


class EmailError(Exception):
    """Base class for email related failures."""


class EmailConfigurationError(EmailError):
    """Raised when the selected transport lacks the settings it needs."""


class EmailDeliveryError(EmailError):
    """Raised when the transport refuses or fails to deliver a message."""

    reason = "delivery_failed"

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class EmailAuthenticationError(EmailDeliveryError):
    """The relay rejected the configured credentials."""

    reason = "invalid_credentials"


class EmailTimeoutError(EmailDeliveryError):
    """The relay did not answer in time."""

    reason = "timeout"


__all__ = [
    "EmailAuthenticationError",
    "EmailConfigurationError",
    "EmailDeliveryError",
    "EmailError",
    "EmailMessage",
    "EmailTimeoutError",
    "EmailTransport",
]
