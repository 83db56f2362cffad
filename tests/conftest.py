"""
Pytest configuration for Homestay tests
"""
import asyncio
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.pool import NullPool

# Ensure homestay is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from homestay.core.config import Settings
from homestay.core.security import create_access_token
from homestay.database import Database
from homestay.models import Booking, BookingStatus, House, PaymentStatus, User, UserRole
from homestay.services.user_service import UserService


@pytest_asyncio.fixture
async def db():
    """Session on a fresh in-memory database"""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_all()
    async with database.session_factory() as session:
        yield session
    await database.dispose()


@pytest_asyncio.fixture
async def users(db):
    """Two regular users and an admin"""
    alice = await UserService.create_user(db, "Alice", "alice@example.com", "secret123")
    bob = await UserService.create_user(db, "Bob", "bob@example.com", "secret123")
    admin = await UserService.create_user(
        db, "Admin", "admin@example.com", "secret123", role=UserRole.ADMIN
    )
    return SimpleNamespace(alice=alice, bob=bob, admin=admin)


@pytest.fixture
def make_house(db):
    async def _make(owner: User, **overrides) -> House:
        data = {
            "title": "Lake Cabin",
            "description": "Quiet cabin by the lake",
            "price": Decimal("100.00"),
            "bedrooms": 2,
            "bathrooms": 1,
            "images": [],
            "amenities": ["WiFi"],
            "city": "Hyderabad",
            "state": "Telangana",
            "zip_code": "500001",
            "owner_id": owner.id,
        }
        data.update(overrides)
        house = House(**data)
        db.add(house)
        await db.commit()
        await db.refresh(house)
        return house

    return _make


@pytest.fixture
def make_booking(db):
    """Insert a booking directly, bypassing the lifecycle checks"""

    async def _make(
        house: House,
        user: User,
        check_in: date,
        check_out: date,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> Booking:
        booking = Booking(
            house_id=house.id,
            user_id=user.id,
            check_in=check_in,
            check_out=check_out,
            total_price=house.price * (check_out - check_in).days,
            status=status,
            payment_status=PaymentStatus.PENDING,
        )
        db.add(booking)
        await db.commit()
        await db.refresh(booking)
        return booking

    return _make


# -------------------------------------------------
# HTTP-level fixtures
# -------------------------------------------------


@pytest.fixture
def api(tmp_path):
    """TestClient over a file-backed database, plus helpers to seed users"""
    from fastapi.testclient import TestClient

    from homestay.main import create_app

    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        jwt_secret="test-secret",
        rate_limit_enabled=False,
        file_upload_path=str(tmp_path / "uploads"),
        max_file_upload=1024,
    )
    # NullPool: each event loop (TestClient's and the seeding helper's) opens its own connections
    database = Database.from_settings(settings, poolclass=NullPool)
    asyncio.run(database.create_all())

    def create_user(name: str, email: str, role: UserRole = UserRole.USER) -> User:
        async def _create():
            async with database.session_factory() as session:
                return await UserService.create_user(session, name, email, "secret123", role)

        return asyncio.run(_create())

    def headers_for(user: User) -> dict:
        token = create_access_token(settings, {"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    app = create_app(settings=settings, database=database, configure_logging=False)
    with TestClient(app) as client:
        yield SimpleNamespace(
            client=client,
            app=app,
            settings=settings,
            create_user=create_user,
            headers_for=headers_for,
        )


@pytest.fixture
def sample_house_payload():
    """Sample data for house creation"""
    return {
        "title": "Luxury Beachfront Villa",
        "description": "Villa with direct beach access and ocean views.",
        "price": 350,
        "bedrooms": 4,
        "bathrooms": 3,
        "images": ["https://images.example.com/villa-1.jpg"],
        "amenities": ["Pool", "WiFi"],
        "location": {
            "latitude": 17.3850,
            "longitude": 78.4867,
            "address": "123 Beach Road",
            "city": "Hyderabad",
            "state": "Telangana",
            "zip_code": "500001",
        },
    }
