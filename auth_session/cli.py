#!/usr/bin/env python3
"""
Auth Session CLI

Drives SessionAdapter from the command line. Each invocation runs the
startup session check, performs one operation and prints the resulting
user record as JSON. Cookies live only for the duration of one run, so
commands that need a session accept --email/--password to log in first.

Usage:
    python -m auth_session me
    python -m auth_session login you@example.com
    python -m auth_session register you@example.com "Your Name"
    python -m auth_session set-handle github octocat --email you@example.com

Examples:
    # Point at a different backend
    AUTH_API_URL=https://auth.example.com python -m auth_session me

    # Update profile fields
    python -m auth_session update-profile bio="Hello" city=Zurich --email you@example.com
"""

import argparse
import asyncio
import getpass
import json
import logging
import sys
from typing import Dict, List, Optional

import httpx
from dotenv import load_dotenv

from auth_session.adapter import SessionAdapter
from auth_session.config import get_settings
from auth_session.notifications import Notification

load_dotenv()

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, quiet: bool = False):
    """Configure logging based on verbosity."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def stderr_notifier(notification: Notification) -> None:
    print(f"[{notification.level.value}] {notification.message}", file=sys.stderr)


def parse_fields(pairs: List[str]) -> Dict[str, str]:
    """Parse KEY=VALUE arguments into a dict."""
    fields = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got: {pair!r}")
        fields[key.strip()] = value
    return fields


def _password(args) -> str:
    return args.password or getpass.getpass("Password: ")


async def _ensure_login(session: SessionAdapter, args) -> bool:
    """Log in with --email/--password if given, else require an existing session."""
    if getattr(args, "email", None):
        return await session.login_with_email(args.email, _password(args))
    if session.user is None:
        logger.error("Not logged in (pass --email to log in first)")
        return False
    return True


async def cmd_me(session: SessionAdapter, args) -> bool:
    return session.user is not None


async def cmd_login(session: SessionAdapter, args) -> bool:
    return await session.login_with_email(args.login_email, _password(args))


async def cmd_register(session: SessionAdapter, args) -> bool:
    return await session.register_with_email(args.login_email, _password(args), args.name)


async def cmd_google(session: SessionAdapter, args) -> bool:
    return await session.login_with_google(args.token) is not None


async def cmd_github(session: SessionAdapter, args) -> bool:
    return await session.login_with_github(args.code)


async def cmd_logout(session: SessionAdapter, args) -> bool:
    if getattr(args, "email", None) and not await _ensure_login(session, args):
        return False
    await session.logout()
    return True


async def cmd_set_handle(session: SessionAdapter, args) -> bool:
    if not await _ensure_login(session, args):
        return False
    return await session.update_handle(args.platform, args.handle)


async def cmd_update_profile(session: SessionAdapter, args) -> bool:
    if not await _ensure_login(session, args):
        return False
    return await session.update_profile(parse_fields(args.fields))


async def cmd_delete_account(session: SessionAdapter, args) -> bool:
    if not await _ensure_login(session, args):
        return False
    return await session.delete_account()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auth_session",
        description="Run account operations against the auth backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Backend base URL (default: AUTH_API_URL or http://localhost:8000)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    # Shared --email/--password for commands acting on an account
    account = argparse.ArgumentParser(add_help=False)
    account.add_argument("--email", type=str, help="Log in with this email before acting")
    account.add_argument("--password", type=str, help="Password (prompted if omitted)")

    password_only = argparse.ArgumentParser(add_help=False)
    password_only.add_argument("--password", type=str, help="Password (prompted if omitted)")

    commands = parser.add_subparsers(dest="command", required=True)

    p = commands.add_parser("me", help="Show the current session's user")
    p.set_defaults(handler=cmd_me)

    p = commands.add_parser("login", parents=[password_only], help="Log in with email and password")
    p.add_argument("login_email", metavar="EMAIL")
    p.set_defaults(handler=cmd_login)

    p = commands.add_parser("register", parents=[password_only], help="Create an account")
    p.add_argument("login_email", metavar="EMAIL")
    p.add_argument("name", metavar="NAME")
    p.set_defaults(handler=cmd_register)

    p = commands.add_parser("google", help="Log in with a Google credential")
    p.add_argument("token", metavar="TOKEN")
    p.set_defaults(handler=cmd_google)

    p = commands.add_parser("github", help="Log in with a GitHub OAuth code")
    p.add_argument("code", metavar="CODE")
    p.set_defaults(handler=cmd_github)

    p = commands.add_parser("logout", parents=[account], help="Log out")
    p.set_defaults(handler=cmd_logout)

    p = commands.add_parser("set-handle", parents=[account], help="Set a platform handle")
    p.add_argument("platform", metavar="PLATFORM")
    p.add_argument("handle", metavar="HANDLE")
    p.set_defaults(handler=cmd_set_handle)

    p = commands.add_parser("update-profile", parents=[account], help="Update profile fields")
    p.add_argument("fields", metavar="KEY=VALUE", nargs="+")
    p.set_defaults(handler=cmd_update_profile)

    p = commands.add_parser("delete-account", parents=[account], help="Delete the account")
    p.set_defaults(handler=cmd_delete_account)

    return parser


async def run(args, http_transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """Run one command. Returns the process exit code."""
    async with SessionAdapter(
        base_url=args.api_url,
        notifier=stderr_notifier,
        settings=get_settings(),
        http_transport=http_transport,
    ) as session:
        ok = await args.handler(session, args)
        print(json.dumps(session.user, indent=2, default=str))

    return 0 if ok else 1


def main(argv: Optional[List[str]] = None, http_transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    if args.command == "update-profile":
        try:
            parse_fields(args.fields)
        except ValueError as e:
            parser.error(str(e))

    return asyncio.run(run(args, http_transport=http_transport))


if __name__ == "__main__":
    sys.exit(main())
