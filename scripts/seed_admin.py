"""
Seed Admin User

Creates the initial administrator account. Registering an admin through
the API requires an admin bearer token, so the first one is created here.
Run this script once after the migrations.

Credentials come from the environment:
    SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD,
    SEED_ADMIN_FIRST_NAME (default "School"), SEED_ADMIN_LAST_NAME (default "Admin")

Usage:
    alembic upgrade head
    SEED_ADMIN_EMAIL=admin@example.com SEED_ADMIN_PASSWORD=... python scripts/seed_admin.py
"""

import asyncio
import os
import sys

from schoolhub.core.database import async_session_maker, close_db
from schoolhub.core.security import hash_password
from schoolhub.modules.users import UserRepository, UserRole


async def seed_admin() -> int:
    """Create the admin user if it doesn't exist."""
    email = os.environ.get("SEED_ADMIN_EMAIL", "").strip()
    password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    first_name = os.environ.get("SEED_ADMIN_FIRST_NAME", "School")
    last_name = os.environ.get("SEED_ADMIN_LAST_NAME", "Admin")

    if not email or len(password) < 6:
        print("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD (6+ characters) must be set")
        return 1

    async with async_session_maker() as db:
        existing_user = await UserRepository.get_by_email(db, email)
        if existing_user:
            print(f"User already exists: {existing_user.email}")
            print(f"  ID: {existing_user.id}")
            print(f"  Role: {existing_user.role.value}")
            return 0

        admin_user = await UserRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Email: {admin_user.email}")
        print(f"  Name: {admin_user.full_name}")
        print(f"  ID: {admin_user.id}")

    await close_db()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(seed_admin()))
