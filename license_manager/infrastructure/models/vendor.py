"""SQLAlchemy model for the vendors table."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from license_manager.infrastructure.database import Base


class VendorModel(Base):
    """Company selling licenses."""

    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    contact_person = Column(String(100), nullable=True)
    email = Column(String(100), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())


__all__ = ["VendorModel"]
