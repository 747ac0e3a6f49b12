"""Run the license expiration check once from the command line."""

from __future__ import annotations

import argparse
import asyncio

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from license_manager.application.use_cases.notification_settings import (
    get_notification_settings,
    list_enabled_schedules,
)
from license_manager.application.use_cases.notifications import (
    DeliveryOptions,
    ExpirationNotifier,
)
from license_manager.config import get_settings
from license_manager.domain.entities import (
    DEFAULT_DAYS_BEFORE_EXPIRATION,
    NotificationRunSummary,
    NotificationScope,
)
from license_manager.domain.errors import RecipientNotFoundError, UserNotFoundError
from license_manager.infrastructure.database import build_engine, initialize_database
from license_manager.infrastructure.email import (
    EmailConfigurationError,
    EmailDeliveryError,
    build_email_transport,
)
from license_manager.utils import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for a one-off notification run."""

    parser = argparse.ArgumentParser(
        description="Send license expiration notifications once and exit.",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--user-id",
        type=int,
        default=None,
        help="Run the check with the saved settings of this user",
    )
    target.add_argument(
        "--all-users",
        action="store_true",
        help="Run the check for every user with email notifications enabled",
    )
    target.add_argument(
        "--test-email",
        type=int,
        metavar="USER_ID",
        default=None,
        help="Send a test email to this user's notification address",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Days ahead for a run addressed to ADMIN_EMAIL (default: 30)",
    )
    parser.add_argument(
        "--include-inactive",
        action="store_true",
        help="Also include inactive licenses in a run addressed to ADMIN_EMAIL",
    )
    args = parser.parse_args(argv)
    targets_user = args.user_id is not None or args.all_users or args.test_email is not None
    if targets_user and (args.days is not None or args.include_inactive):
        parser.error("--days and --include-inactive only apply to a run addressed to ADMIN_EMAIL")
    return args


def build_scopes(session_factory: sessionmaker, args: argparse.Namespace) -> list[NotificationScope]:
    """Translate the arguments into the scopes of one run."""

    with session_factory() as session:
        if args.user_id is not None:
            settings = get_notification_settings(session, args.user_id)
            return [
                NotificationScope(
                    days_ahead=settings.days_before_expiration,
                    include_inactive=settings.include_inactive,
                    user_id=args.user_id,
                )
            ]
        if args.all_users:
            return [
                NotificationScope(
                    days_ahead=item.days_before_expiration,
                    include_inactive=item.include_inactive,
                    user_id=item.user_id,
                )
                for item in list_enabled_schedules(session)
            ]
    return [
        NotificationScope(
            days_ahead=(
                args.days if args.days is not None else DEFAULT_DAYS_BEFORE_EXPIRATION
            ),
            include_inactive=args.include_inactive,
        )
    ]


def print_summary(summary: NotificationRunSummary) -> None:
    print(
        "Notification run finished:\n"
        f"  Licenses selected: {summary.selected}\n"
        f"  Licenses skipped: {summary.skipped}\n"
        f"  Digests: {summary.digests}\n"
        f"  Sent: {summary.sent}\n"
        f"  Failed: {summary.failed}\n"
        f"  Licenses marked: {summary.marked}"
    )
    for address in summary.failed_recipients:
        print(f"  Failed recipient: {address}")


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)

    try:
        transport = build_email_transport(settings)
    except EmailConfigurationError as exc:
        raise SystemExit(f"Email is not configured: {exc}") from exc

    engine = build_engine(settings)
    initialize_database(engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    notifier = ExpirationNotifier(
        session_factory, transport, DeliveryOptions.from_settings(settings)
    )

    try:
        if args.test_email is not None:
            try:
                result = await notifier.send_test_notification(args.test_email)
            except (UserNotFoundError, RecipientNotFoundError, EmailDeliveryError) as exc:
                raise SystemExit(f"Test email failed: {exc}") from exc
            print(f"Test email sent to {result.recipient} ({result.message_id})")
            return 0

        try:
            scopes = build_scopes(session_factory, args)
        except UserNotFoundError as exc:
            raise SystemExit(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise SystemExit(f"Could not read notification settings: {exc}") from exc

        if not scopes:
            print("No users have email notifications enabled.")
            return 0

        summary = await notifier.process_many(scopes)
        print_summary(summary)
        return 1 if summary.failed else 0
    finally:
        engine.dispose()


def main(argv: list[str] | None = None) -> None:
    """Run the notification pipeline using the provided command line arguments."""

    raise SystemExit(asyncio.run(run(parse_args(argv))))


if __name__ == "__main__":
    main()
