"""DocVault command line interface.

Usage:
    docvault send-expiry-notifications [--direct]
    docvault create-user --email jane@example.com --name "Jane Doe" [--password ...]
"""

import argparse
import getpass
import sys
from typing import List, Optional

from config import settings
from database import SessionLocal
from observability.logging_config import configure_logging


def send_expiry_notifications_command(args: argparse.Namespace) -> int:
    """Run the expiry notification batch once, synchronously."""
    from notifications.dispatcher import CeleryMessageDispatcher, DirectMailDispatcher
    from notifications.service import send_expiry_notifications

    print("Sending document expiry notifications...")

    db = SessionLocal()
    try:
        dispatcher = DirectMailDispatcher() if args.direct else CeleryMessageDispatcher()
        statistics = send_expiry_notifications(db, dispatcher)
    except Exception as e:
        print(f"ERROR: Expiry notification run failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"Sent {statistics.users_notified} notification(s) successfully.")
    if statistics.has_errors:
        print(
            f"WARNING: {statistics.dispatch_errors} user(s) could not be notified; see logs.",
            file=sys.stderr,
        )
    return 0


def create_user_command(args: argparse.Namespace) -> int:
    """Create a user account."""
    from auth.password import hash_password, validate_password_strength
    from infrastructure.repositories.user_repository import UserRepository
    from models.user import User

    password = args.password or getpass.getpass("Password: ")

    is_valid, error_msg = validate_password_strength(password)
    if not is_valid:
        print(f"ERROR: Password does not meet strength requirements: {error_msg}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if UserRepository(db).get_by_email(args.email):
            print(f"ERROR: User with email {args.email} already exists", file=sys.stderr)
            return 1

        user = User(
            email=args.email,
            name=args.name,
            password_hash=hash_password(password),
            status="ACTIVE",
        )
        db.add(user)
        db.commit()

        print("SUCCESS: User created")
        print(f"  ID:    {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Name:  {user.name}")
        return 0

    except Exception as e:
        db.rollback()
        print(f"ERROR: Failed to create user: {e}", file=sys.stderr)
        return 1

    finally:
        db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docvault", description="DocVault administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    notify = subparsers.add_parser(
        "send-expiry-notifications",
        help="Send daily notifications to users about expiring and expired documents",
    )
    notify.add_argument(
        "--direct",
        action="store_true",
        help="Send mail over SMTP immediately instead of queueing it for the worker",
    )
    notify.set_defaults(handler=send_expiry_notifications_command)

    create_user = subparsers.add_parser("create-user", help="Create a user account")
    create_user.add_argument("--email", required=True)
    create_user.add_argument("--name", required=True)
    create_user.add_argument("--password", help="Prompted for if omitted")
    create_user.set_defaults(handler=create_user_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    args = build_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
