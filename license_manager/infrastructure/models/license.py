"""SQLAlchemy model for the licenses table."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.sql import expression

from license_manager.infrastructure.database import Base


class LicenseModel(Base):
    """Database representation of a software license."""

    __tablename__ = "licenses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    license_key = Column(Text, nullable=True)
    license_type = Column(String(50), nullable=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    purchase_date = Column(Date, nullable=True)
    expiration_date = Column(Date, nullable=True, index=True)
    cost = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=True, default="USD")
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    notification_sent = Column(
        Boolean,
        nullable=True,
        default=False,
        server_default=expression.false(),
    )
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())


__all__ = ["LicenseModel"]
