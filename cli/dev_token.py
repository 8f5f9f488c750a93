"""Mint a development bearer token.

Usage:
    uv run dev-token LeudiX1
    uv run dev-token Lucy2 --no-roles
    uv run dev-token Sarah --role CARD_OWNER --expires-minutes 5

Tokens are signed with AUTH_SECRET_KEY, so they are accepted by any
instance of the service sharing that key.
"""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta

from app.core.auth import CARD_OWNER, create_access_token


def main() -> None:
    """Print a signed JWT for the given principal."""
    parser = argparse.ArgumentParser(prog="dev-token", description="Mint a development JWT")
    parser.add_argument("subject", help="Principal name placed in the sub claim")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        help=f"Role to grant; repeatable (default: {CARD_OWNER})",
    )
    parser.add_argument("--no-roles", action="store_true", help="Grant no roles at all")
    parser.add_argument("--expires-minutes", type=int, help="Override token lifetime")
    args = parser.parse_args(sys.argv[1:])

    roles = [] if args.no_roles else (args.roles or [CARD_OWNER])
    expires = timedelta(minutes=args.expires_minutes) if args.expires_minutes else None

    print(create_access_token(args.subject, roles=roles, expires_delta=expires))
