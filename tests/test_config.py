"""Tests for environment driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from license_manager.config import Settings, get_settings, reset_settings_cache


def test_defaults(monkeypatch):
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    settings = Settings(_env_file=None, secret_key="secret")

    assert settings.app_timezone == "Asia/Bangkok"
    assert settings.email_backend == "smtp"
    assert settings.smtp_host == "smtp.gmail.com"
    assert settings.smtp_port == 587
    assert settings.skip_notified_licenses is False
    assert settings.run_notifications_on_startup is False
    assert settings.sender_address is None


def test_sender_falls_back_to_smtp_user(monkeypatch):
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    settings = Settings(_env_file=None, secret_key="secret", smtp_user="bot@example.com")

    assert settings.sender_address == "bot@example.com"


@pytest.mark.parametrize(
    "values",
    [
        {"email_backend": "carrier-pigeon"},
        {"email_from": "not-an-address"},
        {"admin_email": "nobody"},
        {"smtp_port": 0},
    ],
)
def test_invalid_values_are_rejected(values):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, secret_key="secret", **values)


def test_settings_are_cached_until_reset(monkeypatch):
    reset_settings_cache()
    monkeypatch.setenv("ADMIN_EMAIL", "first@example.com")
    first = get_settings()
    monkeypatch.setenv("ADMIN_EMAIL", "second@example.com")

    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().admin_email == "second@example.com"
    reset_settings_cache()
