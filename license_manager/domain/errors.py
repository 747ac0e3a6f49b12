"""Errors raised by notification use cases."""


class UserNotFoundError(ValueError):
    """The referenced user does not exist."""


class RecipientNotFoundError(ValueError):
    """No email address could be resolved for a notification."""


class InvalidNotificationSettingsError(ValueError):
    """Submitted notification settings failed validation."""


__all__ = [
    "InvalidNotificationSettingsError",
    "RecipientNotFoundError",
    "UserNotFoundError",
]
