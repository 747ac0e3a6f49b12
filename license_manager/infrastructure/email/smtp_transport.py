"""Deliver email through an SMTP relay."""

from __future__ import annotations

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid

import aiosmtplib

from .message import (
    EmailAuthenticationError,
    EmailDeliveryError,
    EmailMessage,
    EmailTimeoutError,
)

logger = logging.getLogger(__name__)


class SmtpTransport:
    """SMTP transport with STARTTLS and authentication."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        start_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.start_tls = start_tls
        self.timeout = timeout

    def build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = (
            formataddr((message.sender_name, message.sender))
            if message.sender_name
            else message.sender
        )
        mime["To"] = message.recipient
        mime["Subject"] = message.subject
        mime["Date"] = formatdate(localtime=True)
        mime["Message-ID"] = make_msgid(domain=message.sender.rpartition("@")[2] or None)

        # Plain text first: clients render the last alternative they support.
        if message.text_body:
            mime.attach(MIMEText(message.text_body, "plain", "utf-8"))
        mime.attach(MIMEText(message.html_body, "html", "utf-8"))
        return mime

    async def send(self, message: EmailMessage) -> str:
        mime = self.build_mime(message)
        try:
            await aiosmtplib.send(
                mime,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self._password,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPAuthenticationError as exc:
            raise EmailAuthenticationError(
                f"SMTP authentication failed for {self.username}: {exc.code}"
            ) from exc
        except aiosmtplib.SMTPTimeoutError as exc:
            raise EmailTimeoutError(
                f"Connection to {self.host}:{self.port} timed out"
            ) from exc
        except aiosmtplib.SMTPRecipientsRefused as exc:
            raise EmailDeliveryError(
                f"Recipient {message.recipient} was refused", reason="rejected"
            ) from exc
        except aiosmtplib.SMTPResponseException as exc:
            raise EmailDeliveryError(
                f"SMTP server answered {exc.code}: {exc.message}",
                reason="rejected",
            ) from exc
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(
                f"Could not deliver email via {self.host}:{self.port}: {exc}",
                reason="connection",
            ) from exc

        message_id = mime["Message-ID"]
        logger.info("Email '%s' sent to %s (%s)", message.subject, message.recipient, message_id)
        return message_id


__all__ = ["SmtpTransport"]
