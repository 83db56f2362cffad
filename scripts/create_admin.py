import argparse
import asyncio
import os
import sys

# Add project root to path
sys.path.append(os.getcwd())

from homestay.core.config import Settings
from homestay.core.errors import ValidationError
from homestay.database import Database
from homestay.models import UserRole
from homestay.services.user_service import UserService


async def create_admin(name: str, email: str, password: str):
    database = Database.from_settings(Settings.from_env())
    await database.create_all()
    try:
        async with database.session_factory() as session:
            try:
                user = await UserService.create_user(
                    session, name, email, password, role=UserRole.ADMIN
                )
            except ValidationError as e:
                print(f"❌ {e.message}: {email}")
                return
            print(f"✅ Created admin #{user.id}: {user.email}")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email", help="Admin email")
    parser.add_argument("password", help="Admin password")
    parser.add_argument("--name", default="Admin User", help="Display name")
    args = parser.parse_args()

    asyncio.run(create_admin(args.name, args.email, args.password))
