"""Tests for the SMTP and SendGrid transports and their configuration."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from urllib.error import URLError

import aiosmtplib
import pytest
from python_http_client.exceptions import BadRequestsError, UnauthorizedError

from license_manager.config import Settings
from license_manager.infrastructure.email import (
    EmailAuthenticationError,
    EmailConfigurationError,
    EmailDeliveryError,
    EmailMessage,
    EmailTimeoutError,
    SendGridTransport,
    SmtpTransport,
    build_email_transport,
)
from license_manager.infrastructure.email import sendgrid_transport, smtp_transport
from license_manager.infrastructure.email.sendgrid_transport import (
    build_sendgrid_mail,
    extract_sendgrid_error_details,
)

MESSAGE = EmailMessage(
    sender="alerts@example.com",
    sender_name="Alerts",
    recipient="ops@example.com",
    subject="License expiration notice",
    html_body="<p>Hello</p>",
    text_body="Hello",
)


class FakeSMTPSend:
    def __init__(self) -> None:
        self.calls: list[tuple[object, dict]] = []
        self.error: Exception | None = None

    async def __call__(self, message, **kwargs):
        self.calls.append((message, kwargs))
        if self.error is not None:
            raise self.error
        return {}, "250 OK"


@pytest.fixture()
def fake_smtp(monkeypatch):
    fake = FakeSMTPSend()
    monkeypatch.setattr(smtp_transport.aiosmtplib, "send", fake)
    return fake


def _smtp() -> SmtpTransport:
    return SmtpTransport(
        host="smtp.example.com", port=587, username="bot@example.com", password="secret"
    )


def test_smtp_sends_multipart_message(fake_smtp):
    message_id = asyncio.run(_smtp().send(MESSAGE))

    ((mime, options),) = fake_smtp.calls
    assert options == {
        "hostname": "smtp.example.com",
        "port": 587,
        "username": "bot@example.com",
        "password": "secret",
        "start_tls": True,
        "timeout": 30.0,
    }
    assert mime["To"] == "ops@example.com"
    assert mime["Subject"] == "License expiration notice"
    assert "Alerts" in mime["From"]
    assert [part.get_content_type() for part in mime.get_payload()] == [
        "text/plain",
        "text/html",
    ]
    assert message_id == mime["Message-ID"]


@pytest.mark.parametrize(
    ("error", "expected", "reason"),
    [
        (
            aiosmtplib.SMTPAuthenticationError(535, "Invalid login"),
            EmailAuthenticationError,
            "invalid_credentials",
        ),
        (aiosmtplib.SMTPTimeoutError("timed out"), EmailTimeoutError, "timeout"),
        (
            aiosmtplib.SMTPRecipientsRefused(
                [aiosmtplib.SMTPRecipientRefused(550, "No such user", "ops@example.com")]
            ),
            EmailDeliveryError,
            "rejected",
        ),
        (aiosmtplib.SMTPResponseException(554, "Transaction failed"), EmailDeliveryError, "rejected"),
        (aiosmtplib.SMTPConnectError("refused"), EmailDeliveryError, "connection"),
    ],
)
def test_smtp_errors_are_typed(fake_smtp, error, expected, reason):
    fake_smtp.error = error

    with pytest.raises(expected) as excinfo:
        asyncio.run(_smtp().send(MESSAGE))

    assert excinfo.value.reason == reason


class FakeSendGridClient:
    instances: list["FakeSendGridClient"] = []
    response = SimpleNamespace(status_code=202, body=b"", headers={"X-Message-Id": "abc123"})
    error: Exception | None = None

    def __init__(self, api_key):
        self.api_key = api_key
        self.client = SimpleNamespace(timeout=None)
        self.sent = []
        FakeSendGridClient.instances.append(self)

    def send(self, mail):
        self.sent.append(mail)
        if FakeSendGridClient.error is not None:
            raise FakeSendGridClient.error
        return FakeSendGridClient.response


@pytest.fixture()
def fake_sendgrid(monkeypatch):
    FakeSendGridClient.instances = []
    FakeSendGridClient.error = None
    FakeSendGridClient.response = SimpleNamespace(
        status_code=202, body=b"", headers={"X-Message-Id": "abc123"}
    )
    monkeypatch.setattr(sendgrid_transport, "SendGridAPIClient", FakeSendGridClient)
    return FakeSendGridClient


def _sendgrid() -> SendGridTransport:
    return SendGridTransport(api_key="SG.key", timeout=5)


def test_sendgrid_sends_mail(fake_sendgrid):
    message_id = asyncio.run(_sendgrid().send(MESSAGE))

    (client,) = fake_sendgrid.instances
    assert message_id == "abc123"
    assert client.api_key == "SG.key"
    assert client.client.timeout == 5
    payload = client.sent[0].get()
    assert payload["personalizations"][0]["to"][0]["email"] == "ops@example.com"
    assert payload["from"] == {"email": "alerts@example.com", "name": "Alerts"}
    assert payload["subject"] == "License expiration notice"
    assert [item["type"] for item in payload["content"]] == ["text/plain", "text/html"]


def test_build_sendgrid_mail_without_text_part():
    message = EmailMessage(
        sender="alerts@example.com",
        recipient="ops@example.com",
        subject="Subject",
        html_body="<p>Only HTML</p>",
    )

    payload = build_sendgrid_mail(message).get()

    assert payload["from"] == {"email": "alerts@example.com"}
    assert payload["content"] == [{"type": "text/html", "value": "<p>Only HTML</p>"}]


def test_sendgrid_rejection_is_reported(fake_sendgrid):
    body = json.dumps({"errors": [{"message": "Invalid from address"}]}).encode()
    fake_sendgrid.error = BadRequestsError(
        SimpleNamespace(code=400, reason="Bad Request", hdrs={}, read=lambda: body)
    )

    with pytest.raises(EmailDeliveryError) as excinfo:
        asyncio.run(_sendgrid().send(MESSAGE))

    assert "Invalid from address" in str(excinfo.value)
    assert excinfo.value.reason == "rejected"


def test_sendgrid_unsuccessful_response_is_reported(fake_sendgrid):
    fake_sendgrid.response = SimpleNamespace(status_code=500, body=b"", headers={})

    with pytest.raises(EmailDeliveryError) as excinfo:
        asyncio.run(_sendgrid().send(MESSAGE))

    assert excinfo.value.reason == "rejected"
    assert "status 500" in str(excinfo.value)


def test_sendgrid_unauthorized_maps_to_credentials_error(fake_sendgrid):
    fake_sendgrid.error = UnauthorizedError(
        SimpleNamespace(code=401, reason="Unauthorized", hdrs={}, read=lambda: b"")
    )

    with pytest.raises(EmailAuthenticationError):
        asyncio.run(_sendgrid().send(MESSAGE))


def test_sendgrid_timeout(fake_sendgrid):
    fake_sendgrid.error = URLError(TimeoutError("timed out"))

    with pytest.raises(EmailTimeoutError):
        asyncio.run(_sendgrid().send(MESSAGE))


def test_sendgrid_connection_failure(fake_sendgrid):
    fake_sendgrid.error = URLError("Name or service not known")

    with pytest.raises(EmailDeliveryError) as excinfo:
        asyncio.run(_sendgrid().send(MESSAGE))

    assert excinfo.value.reason == "connection"


def test_extract_sendgrid_error_details_from_bytes():
    body = json.dumps({"errors": [{"message": "first"}, {"message": "second"}]}).encode()

    assert extract_sendgrid_error_details(body) == "first; second"
    assert extract_sendgrid_error_details(b"") is None


def _settings(**values) -> Settings:
    values.setdefault("secret_key", "secret")
    values.setdefault("email_from", "alerts@example.com")
    return Settings(_env_file=None, **values)


def test_build_smtp_transport():
    transport = build_email_transport(
        _settings(smtp_user="bot@example.com", smtp_password="secret", email_timeout=5)
    )

    assert isinstance(transport, SmtpTransport)
    assert transport.timeout == 5


def test_build_sendgrid_transport():
    transport = build_email_transport(
        _settings(email_backend="sendgrid", sendgrid_api_key="SG.key")
    )

    assert isinstance(transport, SendGridTransport)


@pytest.mark.parametrize(
    "values",
    [
        {"smtp_user": "bot@example.com"},
        {"email_backend": "sendgrid"},
        {"email_from": None, "smtp_user": None},
    ],
)
def test_missing_credentials_fail_fast(values):
    with pytest.raises(EmailConfigurationError):
        build_email_transport(_settings(**values))
