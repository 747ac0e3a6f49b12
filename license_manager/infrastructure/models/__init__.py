"""ORM models used by the application infrastructure."""

from .customer import CustomerModel
from .license import LicenseModel
from .notification_settings import NotificationSettingsModel
from .user import UserModel
from .vendor import VendorModel

__all__ = [
    "CustomerModel",
    "LicenseModel",
    "NotificationSettingsModel",
    "UserModel",
    "VendorModel",
]
