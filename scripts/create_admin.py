#!/usr/bin/env python3
"""Create an admin account.

Registration through the API always creates regular users; admins are
created by an operator with this script.

Usage:
    python scripts/create_admin.py --email admin@example.com --name Admin
    python scripts/create_admin.py --email admin@example.com --name Admin --password s3cret!
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog_api.api.dependencies import build_container
from catalog_api.domain.entities import Role
from catalog_api.domain.exceptions import DomainError
from catalog_api.infrastructure.config import settings


async def create_admin(email: str, name: str, password: str) -> str:
    """Register an admin user.

    Args:
        email: Login email.
        name: Display name.
        password: Plaintext password.

    Returns:
        ID of the created user.
    """
    container = build_container(settings)
    if container.database is not None:
        await container.database.connect(
            retries=settings.db_connect_retries,
            backoff_seconds=settings.db_connect_backoff_seconds,
            create_schema=True,
        )
    try:
        result = await container.credentials.register(email, password, name, role=Role.ADMIN)
        return result.user.id
    finally:
        if container.database is not None:
            await container.database.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", required=True, help="Admin login email")
    parser.add_argument("--name", required=True, help="Admin display name")
    parser.add_argument(
        "--password",
        help="Admin password (prompted for when omitted)",
    )
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")

    try:
        user_id = asyncio.run(create_admin(args.email, args.name, password))
    except DomainError as e:
        print(f"✗ {e.message}")
        sys.exit(1)

    print(f"✓ Created admin {args.email} ({user_id})")


if __name__ == "__main__":
    main()
