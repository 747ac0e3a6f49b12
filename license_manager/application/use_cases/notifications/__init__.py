"""Use cases delivering license expiration notifications."""

from .delivery import mark_licenses_notified, send_digest
from .digest import aggregate_digests, build_subject, compose_digest_email
from .expiring_licenses import select_expiring_licenses
from .pipeline import DeliveryOptions, ExpirationNotifier
from .recipients import RecipientResolver, resolve_recipient

__all__ = [
    "DeliveryOptions",
    "ExpirationNotifier",
    "RecipientResolver",
    "aggregate_digests",
    "build_subject",
    "compose_digest_email",
    "mark_licenses_notified",
    "resolve_recipient",
    "select_expiring_licenses",
    "send_digest",
]
