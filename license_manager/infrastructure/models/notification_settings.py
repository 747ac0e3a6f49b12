"""SQLAlchemy model for per-user notification settings."""

from datetime import time

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Time, func
from sqlalchemy.orm import relationship

from license_manager.infrastructure.database import Base


class NotificationSettingsModel(Base):
    """Stores user preferences for license expiration notifications."""

    __tablename__ = "user_notification_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    days_before_expiration = Column(Integer, nullable=False, default=30)
    send_to_email = Column(Boolean, nullable=False, default=True)
    notification_time = Column(Time, nullable=False, default=time(9, 0))
    email_address = Column(String(255), nullable=True)
    include_inactive = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    user = relationship("UserModel", lazy="joined")


__all__ = ["NotificationSettingsModel"]
