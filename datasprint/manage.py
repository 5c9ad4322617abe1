"""Administrative commands for the registration database.

Usage:
  python -m datasprint.manage flush [--yes]
  python -m datasprint.manage promote-admin <email>

flush removes every non-admin team and every pending registration OTP.
promote-admin grants the admin role to the team whose lead email matches.
"""

from __future__ import annotations

import argparse
import sys

from datasprint.database import init_db
from datasprint.errors import NotFoundError
from datasprint.services.users import user_store


def flush(assume_yes: bool) -> int:
    if not assume_yes:
        answer = input("Delete ALL non-admin registrations? Type 'yes' to continue: ")
        if answer.strip().lower() != "yes":
            print("Aborted.")
            return 1
    deleted = user_store.flush_non_admin()
    print(f"Flushed {deleted} non-admin users.")
    print("Flushed all registration OTPs.")
    return 0


def promote_admin(email: str) -> int:
    try:
        entry = user_store.promote_admin(email)
    except NotFoundError:
        print(f"User not found: {email.strip().lower()}")
        return 1
    print(f"User promoted to ADMIN: {entry.username}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="datasprint.manage", description=__doc__.splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)

    flush_parser = commands.add_parser("flush", help="delete all non-admin registrations")
    flush_parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")

    promote_parser = commands.add_parser("promote-admin", help="grant the admin role")
    promote_parser.add_argument("email", help="lead email of the team to promote")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    init_db()
    if args.command == "flush":
        return flush(args.yes)
    return promote_admin(args.email)


if __name__ == "__main__":
    sys.exit(main())
