"""Shared fixtures: in-memory database, seed helpers and a fake transport."""

from __future__ import annotations

import os
import sys
from datetime import date, time
from pathlib import Path

import pytest

# Ensure the project root (which contains the ``license_manager`` package) is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_FROM", "alerts@example.com")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from license_manager.infrastructure.database import initialize_database
from license_manager.infrastructure.email import EmailMessage
from license_manager.infrastructure.models import (
    CustomerModel,
    LicenseModel,
    NotificationSettingsModel,
    UserModel,
    VendorModel,
)

TODAY = date(2024, 6, 15)


class FakeTransport:
    """Record messages instead of sending them; fail for selected recipients."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []
        self.failures: dict[str, Exception] = {}

    async def send(self, message: EmailMessage) -> str:
        error = self.failures.get(message.recipient)
        if error is not None:
            raise error
        self.sent.append(message)
        return f"<fake-{len(self.sent)}@example.com>"

    def recipients(self) -> list[str]:
        return [message.recipient for message in self.sent]


class Seeder:
    """Insert rows through short-lived committed sessions and return their ids."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def _add(self, model) -> int:
        with self.session_factory() as session:
            session.add(model)
            session.commit()
            return model.id

    def user(
        self,
        username: str,
        email: str | None = None,
        *,
        is_active: bool = True,
    ) -> int:
        return self._add(
            UserModel(
                username=username,
                email=email if email is not None else f"{username}@example.com",
                is_active=is_active,
            )
        )

    def vendor(self, name: str) -> int:
        return self._add(VendorModel(name=name))

    def customer(self, name: str) -> int:
        return self._add(CustomerModel(name=name))

    def license(
        self,
        name: str,
        expiration_date: date | None,
        *,
        vendor_id: int | None = None,
        customer_id: int | None = None,
        is_active: bool = True,
        notification_sent: bool = False,
    ) -> int:
        return self._add(
            LicenseModel(
                name=name,
                expiration_date=expiration_date,
                vendor_id=vendor_id,
                customer_id=customer_id,
                is_active=is_active,
                notification_sent=notification_sent,
            )
        )

    def settings(
        self,
        user_id: int,
        *,
        days_before_expiration: int = 30,
        send_to_email: bool = True,
        notification_time: time = time(9, 0),
        email_address: str | None = None,
        include_inactive: bool = False,
    ) -> int:
        return self._add(
            NotificationSettingsModel(
                user_id=user_id,
                days_before_expiration=days_before_expiration,
                send_to_email=send_to_email,
                notification_time=notification_time,
                email_address=email_address,
                include_inactive=include_inactive,
            )
        )

    def license_row(self, license_id: int) -> LicenseModel | None:
        with self.session_factory() as session:
            model = session.get(LicenseModel, license_id)
            if model is not None:
                session.expunge(model)
            return model


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()
