"""
Standalone script to bootstrap the first admin account.

Registration over the API only creates students unless the caller is an
admin, so the very first admin has to be inserted directly.

Usage:
    python scripts/create_admin.py <username> "<full name>"
The password is read from the terminal.
"""
import argparse
import asyncio
import getpass
import sys

from sqlalchemy import select

from class_scheduler.common.security_utils import HashedPassword
from class_scheduler.database import engine as db_engine
from class_scheduler.database.db_enums import UserRole
from class_scheduler.database.models import Users


async def create_admin(username: str, name: str, password: str) -> int:
    db_engine.create_db_engine_and_session_factory()
    try:
        async with db_engine.AsyncSessionLocal() as session:
            existing = (await session.execute(
                select(Users).filter(Users.username == username)
            )).scalars().first()
            if existing:
                print(f"ERROR: user '{username}' already exists (role: {existing.role}).")
                return 1

            admin = Users(
                username=username,
                password=HashedPassword.get_hash(password),
                name=name,
                role=UserRole.ADMIN.value,
                balance=0,
                payment_history=[],
                is_active=True,
            )
            session.add(admin)
            await session.commit()
            print(f"Created admin '{username}' with id {admin.id}.")
            return 0
    finally:
        await db_engine.dispose_db_engine()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an admin user.")
    parser.add_argument("username")
    parser.add_argument("name")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if len(password) < 6:
        print("ERROR: password must be at least 6 characters.")
        return 1
    if password != getpass.getpass("Repeat password: "):
        print("ERROR: passwords do not match.")
        return 1

    return asyncio.run(create_admin(args.username, args.name, password))


if __name__ == "__main__":
    sys.exit(main())
