"""Persistence helpers for license entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from license_manager.domain.entities import License
from license_manager.infrastructure.models import (
    CustomerModel,
    LicenseModel,
    VendorModel,
)


class LicenseRepository:
    """Queries and narrowly scoped updates for :class:`License` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_expiring(
        self,
        *,
        today: date,
        days_ahead: int,
        include_inactive: bool,
        skip_notified: bool = False,
    ) -> Sequence[License]:
        """Return licenses expiring within ``days_ahead`` days or already expired."""

        horizon = today + timedelta(days=days_ahead)
        # Anything before ``today - days_ahead`` is already expired and stays
        # eligible, so the lower bound of the window collapses away.
        query = (
            self._base_query()
            .filter(LicenseModel.expiration_date.isnot(None))
            .filter(LicenseModel.expiration_date <= horizon)
        )
        if not include_inactive:
            query = query.filter(LicenseModel.is_active.is_(True))
        if skip_notified:
            query = query.filter(
                or_(
                    LicenseModel.notification_sent.is_(False),
                    LicenseModel.notification_sent.is_(None),
                )
            )
        query = query.order_by(LicenseModel.expiration_date.asc(), LicenseModel.id.asc())
        return [self._row_to_entity(row) for row in query.all()]

    def mark_notified(self, license_id: int, *, when: datetime | None = None) -> bool:
        """Flag ``license_id`` as notified; return ``False`` when it no longer exists."""

        updated = (
            self.session.query(LicenseModel)
            .filter(LicenseModel.id == license_id)
            .update(
                {
                    LicenseModel.notification_sent: True,
                    LicenseModel.updated_at: when or datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def _base_query(self):
        return (
            self.session.query(
                LicenseModel,
                VendorModel.name.label("vendor_name"),
                CustomerModel.name.label("customer_name"),
            )
            .outerjoin(VendorModel, LicenseModel.vendor_id == VendorModel.id)
            .outerjoin(CustomerModel, LicenseModel.customer_id == CustomerModel.id)
        )

    @staticmethod
    def _row_to_entity(row) -> License:
        model, vendor_name, customer_name = row
        return License(
            id=model.id,
            name=model.name,
            expiration_date=model.expiration_date,
            vendor_id=model.vendor_id,
            customer_id=model.customer_id,
            vendor_name=vendor_name,
            customer_name=customer_name,
            license_key=model.license_key,
            license_type=model.license_type,
            cost=model.cost,
            currency=model.currency,
            is_active=bool(model.is_active),
            notification_sent=bool(model.notification_sent),
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["LicenseRepository"]
