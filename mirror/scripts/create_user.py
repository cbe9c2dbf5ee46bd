"""Create an admin user for the Magic Mirror admin portal.

Usage:
    python -m mirror.scripts.create_user --email admin@example.com --password <password>
"""

from __future__ import annotations

import argparse
import sys

from mirror.db.session import SessionLocal
from mirror.services.auth import create_user, get_user_by_email


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create a Magic Mirror admin user")
    parser.add_argument("--email", required=True, help="Login email for the new user")
    parser.add_argument("--password", required=True, help="Password for the new user")
    parser.add_argument("--name", default=None, help="Display name (optional)")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if get_user_by_email(db, args.email) is not None:
            print(f"User '{args.email}' already exists.")
            sys.exit(1)

        user = create_user(db, args.email, args.password, name=args.name)
        print(f"User '{user.email}' created successfully (id={user.id}).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
