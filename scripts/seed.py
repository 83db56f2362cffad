"""
Load or wipe demo data.

    python scripts/seed.py -i   # admin@example.com / 123456 plus sample houses
    python scripts/seed.py -d   # drop every table
"""
import argparse
import asyncio
import os
import sys
from decimal import Decimal

# Add project root to path
sys.path.append(os.getcwd())

from homestay.core.config import Settings
from homestay.database import Database
from homestay.models import House, UserRole
from homestay.services.user_service import UserService

SAMPLE_HOUSES = [
    {
        "title": "Luxury Beachfront Villa",
        "description": "Beautiful villa with direct beach access and stunning ocean views. "
        "Perfect for family vacations.",
        "price": Decimal("350"),
        "bedrooms": 4,
        "bathrooms": 3,
        "images": [
            "https://images.unsplash.com/photo-1512917774080-9991f1c4c750",
            "https://images.unsplash.com/photo-1613490493576-7fde63acd811",
        ],
        "amenities": ["Pool", "WiFi", "Air Conditioning", "Kitchen", "Free Parking"],
        "latitude": 17.3850,
        "longitude": 78.4867,
        "address": "123 Beach Road",
        "city": "Hyderabad",
        "state": "Telangana",
        "zip_code": "500001",
    },
    {
        "title": "Modern City Apartment",
        "description": "Stylish apartment in the heart of the city with amazing skyline views.",
        "price": Decimal("150"),
        "bedrooms": 2,
        "bathrooms": 2,
        "images": [
            "https://images.unsplash.com/photo-1522708323590-d24dbb6b0267",
            "https://images.unsplash.com/photo-1502672260266-1c1ef2d93688",
        ],
        "amenities": ["WiFi", "Air Conditioning", "Gym", "Security"],
        "latitude": 17.3755,
        "longitude": 78.4761,
        "address": "456 City Center",
        "city": "Hyderabad",
        "state": "Telangana",
        "zip_code": "500002",
    },
    {
        "title": "Cozy Garden Cottage",
        "description": "Charming cottage surrounded by beautiful gardens in a peaceful neighborhood.",
        "price": Decimal("120"),
        "bedrooms": 1,
        "bathrooms": 1,
        "images": [
            "https://images.unsplash.com/photo-1518780664697-55e3ad937233",
            "https://images.unsplash.com/photo-1449158743715-0a90ebb6d2d8",
        ],
        "amenities": ["Garden", "WiFi", "Kitchen", "Parking"],
        "latitude": 17.3934,
        "longitude": 78.4931,
        "address": "789 Garden Lane",
        "city": "Hyderabad",
        "state": "Telangana",
        "zip_code": "500003",
    },
]


async def import_data(database: Database):
    async with database.session_factory() as session:
        admin = await UserService.create_user(
            session, "Admin User", "admin@example.com", "123456", role=UserRole.ADMIN
        )
        session.add_all(House(**house, owner_id=admin.id) for house in SAMPLE_HOUSES)
        await session.commit()
    print(f"✅ Data imported: 1 admin, {len(SAMPLE_HOUSES)} houses")


async def delete_data(database: Database):
    await database.drop_all()
    print("🗑️ Data destroyed")


async def main(args):
    database = Database.from_settings(Settings.from_env())
    try:
        if args.import_data:
            await database.create_all()
            await import_data(database)
        else:
            await delete_data(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the database with demo data")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-i", dest="import_data", action="store_true", help="Import sample data")
    group.add_argument("-d", dest="delete_data", action="store_true", help="Delete all data")
    asyncio.run(main(parser.parse_args()))
