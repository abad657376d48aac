#!/usr/bin/env python3
"""
Car inventory API -- operator command line.

Usage:
  python main.py init-db
  python main.py create-user --email admin@dealer.io --password s3cret! \\
                             --first-name Ada --last-name Admin --role admin
  python main.py serve --port 8000 --reload

Every subcommand accepts --database-url; the default is DATABASE_URL from
the environment or .env (see core/config.py).

create-user is how the first admin account is made: public registration
over HTTP only ever creates sales accounts.
"""

import argparse
import os
import sys
from typing import Optional

import uvicorn
from sqlalchemy.exc import IntegrityError

from api.models import check_password
from auth.models import Role, User
from auth.store import UserStore
from auth.tokens import hash_password
from core.config import get_settings
from inventory.store import CarStore


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the users and cars tables (and their indexes) if missing."""
    users = UserStore(args.database_url)
    cars = CarStore(args.database_url)
    users.close()
    cars.close()
    print(f"  Database ready: {args.database_url}")
    return 0


def cmd_create_user(args: argparse.Namespace) -> int:
    try:
        check_password(args.password)
    except ValueError as exc:
        print(f"  [!] {exc}.")
        return 1

    store = UserStore(args.database_url)
    try:
        if store.get_by_email(args.email) is not None:
            print(f"  [!] A user with email '{args.email}' already exists.")
            return 1
        user = User(
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
            role=Role(args.role),
            hashed_password=hash_password(args.password),
        )
        try:
            user_id = store.create_user(user)
        except IntegrityError:
            print(f"  [!] A user with email '{args.email}' already exists.")
            return 1
    finally:
        store.close()

    print(f"  Created {args.role} user {args.email.strip().lower()} (id={user_id})")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API under uvicorn.

    The app reads its database from settings, so --database-url is handed
    over through DATABASE_URL. uvicorn imports api.main after this point
    (and reload workers inherit the environment).
    """
    os.environ["DATABASE_URL"] = args.database_url
    get_settings.cache_clear()
    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="car-inventory",
        description="Operator commands for the car inventory API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py init-db
  python main.py create-user --email admin@dealer.io --password s3cret! --first-name Ada --last-name Admin --role admin
  DATABASE_URL=sqlite:///./dev.db python main.py serve --reload
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--database-url",
        default=get_settings().database_url,
        metavar="URL",
        help="SQLAlchemy database URL (default: DATABASE_URL setting)",
    )

    init_db = sub.add_parser("init-db", parents=[common], help="Create database tables and indexes")
    init_db.set_defaults(func=cmd_init_db)

    create_user = sub.add_parser("create-user", parents=[common], help="Create a user account with any role")
    create_user.add_argument("--email", required=True)
    create_user.add_argument("--password", required=True)
    create_user.add_argument("--first-name", required=True)
    create_user.add_argument("--last-name", required=True)
    create_user.add_argument(
        "--role",
        choices=[r.value for r in Role],
        default=Role.sales.value,
        help="admin, manager, or sales (default: sales)",
    )
    create_user.set_defaults(func=cmd_create_user)

    serve = sub.add_parser("serve", parents=[common], help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
