#!/usr/bin/env python3
"""
SessionKit -- password login and stateless signed session tokens.

Usage:
  python main.py serve
  python main.py serve --host 127.0.0.1 --port 9000 --reload
  python main.py create-user alice alice@example.com

Configuration comes from environment variables / .env (see core/config.py).
SECRET_KEY is required unless DEBUG=true.
"""

import argparse
import getpass
import sys
from typing import Optional

from pydantic import ValidationError

from api.models import RegisterRequest
from auth.accounts import register_user
from auth.errors import AuthError
from auth.store import UserStore
from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _create_user(args: argparse.Namespace, password: Optional[str] = None) -> int:
    """Register an account from the command line.

    The password is read with getpass so it never lands in shell history.
    Input goes through the same checks as POST /auth/register.
    """
    settings = get_settings()
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("  [!] Passwords do not match.", file=sys.stderr)
            return 1
    try:
        request = RegisterRequest(username=args.username, password=password, email=args.email)
    except ValidationError as exc:
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"])
            print(f"  [!] {field}: {err['msg']}", file=sys.stderr)
        return 1

    store = UserStore(settings.database_url)
    try:
        user = register_user(store, request.username, request.password, request.email, rounds=settings.bcrypt_rounds)
    except AuthError as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"  Created user {user.username} (id={user.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sessionkit",
        description="SessionKit -- password login and signed session tokens.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API under uvicorn.")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting).")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting).")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development).")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Register a user account.")
    create.add_argument("username")
    create.add_argument("email")
    create.set_defaults(func=_create_user)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
