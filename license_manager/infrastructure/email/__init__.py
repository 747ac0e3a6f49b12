"""Email delivery transports."""

from __future__ import annotations

from license_manager.config import Settings

from .message import (
    EmailAuthenticationError,
    EmailConfigurationError,
    EmailDeliveryError,
    EmailError,
    EmailMessage,
    EmailTimeoutError,
    EmailTransport,
)
from .sendgrid_transport import SendGridTransport
from .smtp_transport import SmtpTransport


def build_email_transport(settings: Settings) -> EmailTransport:
    """Build the transport selected by ``settings.email_backend``.

    Raises :class:`EmailConfigurationError` when credentials are missing so the
    process refuses to start instead of silently dropping notifications.
    """

    if not settings.sender_address:
        raise EmailConfigurationError("EMAIL_FROM (or SMTP_USER) must be set to send email")

    if settings.email_backend == "sendgrid":
        if not settings.sendgrid_api_key:
            raise EmailConfigurationError(
                "SENDGRID_API_KEY must be provided when EMAIL_BACKEND=sendgrid"
            )
        return SendGridTransport(
            api_key=settings.sendgrid_api_key, timeout=settings.email_timeout
        )

    if not (settings.smtp_user and settings.smtp_password):
        raise EmailConfigurationError(
            "SMTP_USER and SMTP_PASSWORD must both be provided to enable email"
        )
    return SmtpTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        start_tls=settings.smtp_start_tls,
        timeout=settings.email_timeout,
    )


__all__ = [
    "EmailAuthenticationError",
    "EmailConfigurationError",
    "EmailDeliveryError",
    "EmailError",
    "EmailMessage",
    "EmailTimeoutError",
    "EmailTransport",
    "SendGridTransport",
    "SmtpTransport",
    "build_email_transport",
]
