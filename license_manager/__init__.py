"""License expiration notifications for the license management application."""
