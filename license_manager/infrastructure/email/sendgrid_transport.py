"""Deliver email through SendGrid."""

from __future__ import annotations

import json
import logging
from typing import Any

import anyio.to_thread
from python_http_client.exceptions import ForbiddenError, HTTPError, UnauthorizedError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

from .message import (
    EmailAuthenticationError,
    EmailDeliveryError,
    EmailMessage,
    EmailTimeoutError,
)

logger = logging.getLogger(__name__)


def extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_failure(status_code: Any, body: Any) -> str:
    details = extract_sendgrid_error_details(body)
    if details:
        return f"SendGrid API responded with status {status_code}: {details}"
    return f"SendGrid API responded with status {status_code}"


def build_sendgrid_mail(message: EmailMessage) -> Mail:
    """Return the SendGrid :class:`Mail` for ``message``."""

    return Mail(
        from_email=From(message.sender, message.sender_name),
        to_emails=message.recipient,
        subject=message.subject,
        plain_text_content=message.text_body,
        html_content=message.html_body,
    )


class SendGridTransport:
    """Send messages with the blocking :class:`SendGridAPIClient` in a worker thread."""

    def __init__(self, *, api_key: str, timeout: float = 30.0) -> None:
        self._api_key = api_key
        self.timeout = timeout

    def _deliver(self, mail: Mail) -> Any:
        client = SendGridAPIClient(self._api_key)
        client.client.timeout = self.timeout
        return client.send(mail)

    async def send(self, message: EmailMessage) -> str:
        mail = build_sendgrid_mail(message)
        try:
            response = await anyio.to_thread.run_sync(self._deliver, mail)
        except (UnauthorizedError, ForbiddenError) as exc:
            description = _describe_failure(exc.status_code, exc.body)
            logger.error("%s", description)
            raise EmailAuthenticationError(description) from exc
        except HTTPError as exc:
            description = _describe_failure(exc.status_code, exc.body)
            logger.error("%s", description)
            raise EmailDeliveryError(description, reason="rejected") from exc
        except TimeoutError as exc:
            raise EmailTimeoutError("SendGrid API request timed out") from exc
        except OSError as exc:
            if isinstance(getattr(exc, "reason", None), TimeoutError):
                raise EmailTimeoutError("SendGrid API request timed out") from exc
            raise EmailDeliveryError(
                f"SendGrid API request failed: {exc}", reason="connection"
            ) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            description = _describe_failure(status_code, getattr(response, "body", None))
            logger.error("%s", description)
            raise EmailDeliveryError(description, reason="rejected")

        headers = getattr(response, "headers", None) or {}
        message_id = headers.get("X-Message-Id") or f"sendgrid-{status_code}"
        logger.info("Email '%s' sent to %s (%s)", message.subject, message.recipient, message_id)
        return message_id


__all__ = [
    "SendGridTransport",
    "build_sendgrid_mail",
    "extract_sendgrid_error_details",
]
