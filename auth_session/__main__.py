"""
Auth session CLI entry point.

Usage:
    python -m auth_session me
    python -m auth_session login you@example.com
"""
import sys

from auth_session.cli import main

if __name__ == "__main__":
    sys.exit(main())
