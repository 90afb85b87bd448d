"""Seed script to create an admin account or reset its password.

Usage:
    python -m app.scripts.seed_admin --email=admin@example.com --password=SecurePass123!

NEVER hardcode credentials in this file. Always pass via CLI arguments.
"""

import argparse
import asyncio
import sys

from app.core.database import async_session
from app.services.auth import create_admin, get_admin_by_email, hash_password


async def create_or_update_admin(email: str, password: str, name: str | None = None) -> None:
    """Create a new admin, or reactivate an existing one with the given password."""
    async with async_session() as db:
        admin = await get_admin_by_email(db, email)

        if admin:
            print(f"Admin {admin.email} already exists. Resetting password and reactivating...")
            admin.password_hash = hash_password(password)
            admin.is_active = True
            if name:
                admin.name = name
            await db.commit()
            print(f"Admin {admin.email} updated.")
        else:
            print(f"Creating new admin: {email}...")
            admin = await create_admin(db, email, password, name)
            print(f"Admin {admin.email} created (id={admin.id}).")


def main():
    parser = argparse.ArgumentParser(description="Create or update an admin account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args()

    if len(args.password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    asyncio.run(create_or_update_admin(args.email, args.password, args.name))


if __name__ == "__main__":
    main()
