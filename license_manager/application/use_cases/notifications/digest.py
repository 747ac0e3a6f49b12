"""Group expiring licenses per recipient and render the digest email."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

from license_manager.domain.entities import DigestRequest, ExpiringLicense, Recipient
from license_manager.infrastructure.email import EmailMessage

_URGENT_DAYS = 7
_EXPIRED_COLOR = "#c0392b"
_URGENT_COLOR = "#d68910"
_DEFAULT_COLOR = "#1e8449"


def aggregate_digests(
    entries: Iterable[tuple[ExpiringLicense, Recipient | None]],
) -> dict[str, DigestRequest]:
    """Return one :class:`DigestRequest` per resolved recipient address.

    ``entries`` pairs each license with the recipient resolved for it. Addresses
    are compared case-insensitively, a license is listed at most once per digest
    and entries without a recipient are left out.
    """

    digests: dict[str, DigestRequest] = {}
    seen: dict[str, set[int | None]] = {}
    for item, recipient in entries:
        if recipient is None:
            continue
        key = recipient.key
        digest = digests.get(key)
        if digest is None:
            digest = digests[key] = DigestRequest(recipient=recipient)
            seen[key] = set()
        license_id = item.license.id
        if license_id is not None and license_id in seen[key]:
            continue
        seen[key].add(license_id)
        digest.items.append(item)

    for key in [key for key, digest in digests.items() if not digest.items]:
        del digests[key]
    for digest in digests.values():
        digest.sort()
    return digests


def build_subject(digest: DigestRequest) -> str:
    """Return the subject line for ``digest``."""

    if len(digest.items) == 1:
        item = digest.items[0]
        vendor = item.license.vendor_name or "N/A"
        return f"License expiration notice: {item.license.name} ({vendor}) - {item.status_label}"

    soonest = min(digest.items, key=lambda entry: entry.days_until_expiry)
    return (
        f"{len(digest.items)} licenses need attention - "
        f"soonest: {soonest.status_label.lower()}"
    )


def _status_color(item: ExpiringLicense) -> str:
    if item.is_expired:
        return _EXPIRED_COLOR
    if item.days_until_expiry <= _URGENT_DAYS:
        return _URGENT_COLOR
    return _DEFAULT_COLOR


def _format_date(item: ExpiringLicense) -> str:
    expiration_date = item.license.expiration_date
    return expiration_date.isoformat() if expiration_date else "N/A"


def _render_table(title: str, items: list[ExpiringLicense]) -> str:
    rows = []
    for item in items:
        license = item.license
        color = _status_color(item)
        weight = "bold" if item.is_expired or item.days_until_expiry <= _URGENT_DAYS else "normal"
        rows.append(
            "<tr>"
            f"<td style=\"padding:6px;border:1px solid #ddd\">{escape(license.name)}</td>"
            f"<td style=\"padding:6px;border:1px solid #ddd\">{escape(license.customer_name or 'N/A')}</td>"
            f"<td style=\"padding:6px;border:1px solid #ddd\">{escape(license.vendor_name or 'N/A')}</td>"
            f"<td style=\"padding:6px;border:1px solid #ddd\">{_format_date(item)}</td>"
            f"<td style=\"padding:6px;border:1px solid #ddd;color:{color};font-weight:{weight}\">"
            f"{escape(item.status_label)}</td>"
            "</tr>"
        )
    header = "".join(
        f"<th style=\"padding:6px;border:1px solid #ddd;text-align:left\">{label}</th>"
        for label in ("License", "Customer", "Vendor", "Expiration Date", "Status")
    )
    return (
        f"<h3>{escape(title)} ({len(items)})</h3>"
        "<table style=\"border-collapse:collapse;width:100%\">"
        f"<thead><tr>{header}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )


def render_html(digest: DigestRequest, *, app_name: str) -> str:
    """Render the HTML body with an "Expired" and an "Expiring Soon" section."""

    sections = []
    if digest.expired:
        sections.append(_render_table("Expired", digest.expired))
    if digest.expiring_soon:
        sections.append(_render_table("Expiring Soon", digest.expiring_soon))

    return "".join(
        (
            "<div style=\"font-family:Arial,sans-serif\">",
            "<h2>License Expiration Notice</h2>",
            f"<p>The following {'license requires' if len(digest.items) == 1 else 'licenses require'} "
            "your attention:</p>",
            *sections,
            "<p>Please take appropriate action to renew or cancel these licenses.</p>",
            f"<p style=\"color:#777\">This is an automated message from {escape(app_name)}. "
            "Please do not reply to this email.</p>",
            "</div>",
        )
    )


def render_text(digest: DigestRequest, *, app_name: str) -> str:
    """Render the plain text alternative of the digest."""

    lines = ["License Expiration Notice", ""]
    for title, items in (("Expired", digest.expired), ("Expiring Soon", digest.expiring_soon)):
        if not items:
            continue
        lines.append(f"{title} ({len(items)})")
        for item in items:
            license = item.license
            lines.append(
                f"- {license.name} | customer: {license.customer_name or 'N/A'} | "
                f"vendor: {license.vendor_name or 'N/A'} | expires: {_format_date(item)} | "
                f"{item.status_label}"
            )
        lines.append("")
    lines.append(f"This is an automated message from {app_name}.")
    return "\n".join(lines)


def compose_digest_email(
    digest: DigestRequest,
    *,
    sender: str,
    sender_name: str | None = None,
    app_name: str = "License Management System",
) -> EmailMessage:
    """Return the :class:`EmailMessage` delivering ``digest``."""

    if not digest.items:
        raise ValueError("Cannot compose an email for an empty digest")

    return EmailMessage(
        sender=sender,
        sender_name=sender_name,
        recipient=digest.recipient.address,
        subject=build_subject(digest),
        html_body=render_html(digest, app_name=app_name),
        text_body=render_text(digest, app_name=app_name),
    )


__all__ = [
    "aggregate_digests",
    "build_subject",
    "compose_digest_email",
    "render_html",
    "render_text",
]
