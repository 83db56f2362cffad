"""
House catalogue: search, ownership rules, radius search, photo upload
"""
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from homestay.core.config import Settings
from homestay.core.errors import NotFoundError, UnauthorizedError, UpstreamError, ValidationError
from homestay.models import Booking, House
from homestay.schemas.house import HouseCreate, HouseFilter, HouseUpdate, Location
from homestay.services.geocoding_service import Coordinates
from homestay.services.house_service import HouseService
from homestay.services.pagination import PageParams


class TestSearch:
    @pytest.mark.asyncio
    async def test_bedrooms_and_price_max_newest_first(self, db, users, make_house):
        await make_house(users.admin, title="Small cheap", bedrooms=1, price=Decimal("80"),
                         created_at=datetime(2024, 1, 1))
        await make_house(users.admin, title="Two bed cheap", bedrooms=2, price=Decimal("150"),
                         created_at=datetime(2024, 1, 2))
        await make_house(users.admin, title="Two bed pricey", bedrooms=2, price=Decimal("250"),
                         created_at=datetime(2024, 1, 3))
        await make_house(users.admin, title="Three bed", bedrooms=3, price=Decimal("200"),
                         created_at=datetime(2024, 1, 4))

        houses, total, _ = await HouseService.search_houses(
            db, HouseFilter(bedrooms=2, price_max=Decimal("200")), PageParams()
        )

        assert total == 2
        assert [h.title for h in houses] == ["Three bed", "Two bed cheap"]
        for h in houses:
            assert h.bedrooms >= 2 and h.price <= 200

    @pytest.mark.asyncio
    async def test_price_range_and_location(self, db, users, make_house):
        await make_house(users.admin, title="A", price=Decimal("120"), city="Goa")
        await make_house(users.admin, title="B", price=Decimal("90"), city="Goa")
        await make_house(users.admin, title="C", price=Decimal("120"), city="Pune")

        houses, _, _ = await HouseService.search_houses(
            db,
            HouseFilter(price_min=Decimal("100"), price_max=Decimal("150"), location="goa"),
            PageParams(),
        )
        assert [h.title for h in houses] == ["A"]

    @pytest.mark.asyncio
    async def test_location_wildcards_match_literally(self, db, users, make_house):
        await make_house(users.admin, title="Plain", city="Springfield")
        await make_house(users.admin, title="Literal", address="Unit 5_B, 100% Lane")

        houses, _, _ = await HouseService.search_houses(
            db, HouseFilter(location="Spr_ngf%d"), PageParams()
        )
        assert houses == []

        houses, _, _ = await HouseService.search_houses(
            db, HouseFilter(location="5_b, 100%"), PageParams()
        )
        assert [h.title for h in houses] == ["Literal"]

    @pytest.mark.asyncio
    async def test_sort_and_pagination(self, db, users, make_house):
        for i, price in enumerate((300, 100, 200)):
            await make_house(users.admin, title=f"H{i}", price=Decimal(price))

        houses, total, pagination = await HouseService.search_houses(
            db, HouseFilter(), PageParams(page=2, limit=1, sort="price")
        )
        assert total == 3
        assert [h.price for h in houses] == [Decimal("200")]
        assert pagination.next.page == 3
        assert pagination.prev.page == 1

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, db, users):
        with pytest.raises(ValidationError):
            await HouseService.search_houses(db, HouseFilter(), PageParams(sort="-password"))


class TestHouseMutations:
    @pytest.mark.asyncio
    async def test_create_sets_owner_and_location(self, db, users):
        house = await HouseService.create_house(
            db,
            HouseCreate(
                title="Villa",
                description="Sea view",
                price=Decimal("350"),
                location=Location(latitude=17.385, longitude=78.4867, city="Hyderabad"),
            ),
            users.admin,
        )
        assert house.owner_id == users.admin.id
        assert house.city == "Hyderabad"
        assert house.location["latitude"] == pytest.approx(17.385)
        assert house.photo == "no-photo.jpg"

    @pytest.mark.asyncio
    async def test_owner_partial_update(self, db, users, make_house):
        house = await make_house(users.alice, city="Goa", zip_code="403001")

        updated = await HouseService.update_house(
            db,
            house.id,
            HouseUpdate(price=Decimal("180"), location=Location(city="Panaji")),
            users.alice,
        )
        assert updated.price == Decimal("180")
        assert updated.city == "Panaji"
        assert updated.zip_code == "403001"  # untouched

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update_or_delete(self, db, users, make_house):
        house = await make_house(users.alice)

        with pytest.raises(UnauthorizedError):
            await HouseService.update_house(db, house.id, HouseUpdate(title="Mine"), users.bob)
        with pytest.raises(UnauthorizedError):
            await HouseService.delete_house(db, house.id, users.bob)

    @pytest.mark.asyncio
    async def test_admin_deletes_house_and_its_bookings(self, db, users, make_house, make_booking):
        house = await make_house(users.alice)
        await make_booking(house, users.bob, date(2024, 6, 1), date(2024, 6, 5))

        await HouseService.delete_house(db, house.id, users.admin)

        with pytest.raises(NotFoundError):
            await HouseService.get_house(db, house.id)
        remaining = await db.execute(select(Booking).where(Booking.house_id == house.id))
        assert remaining.scalars().all() == []

    def test_update_rejects_owner_change(self):
        with pytest.raises(ValueError):
            HouseUpdate(owner_id=5)

    def test_price_must_be_positive(self):
        with pytest.raises(ValueError):
            HouseCreate(title="T", description="D", price=Decimal("0"))


class TestRadiusSearch:
    @pytest.mark.asyncio
    async def test_only_houses_within_distance(self, db, users, make_house):
        # Hyderabad centre, one house ~1 mile away, one ~390 miles away (Bengaluru)
        await make_house(users.admin, title="Near", latitude=17.3755, longitude=78.4761)
        await make_house(users.admin, title="Far", latitude=12.9716, longitude=77.5946)
        await make_house(users.admin, title="Unlocated", latitude=None, longitude=None)

        geocoder = MagicMock()
        geocoder.geocode = AsyncMock(return_value=Coordinates(17.3850, 78.4867))

        houses = await HouseService.get_houses_in_radius(db, geocoder, "500001", 10)

        assert [h.title for h in houses] == ["Near"]
        geocoder.geocode.assert_awaited_once_with("500001")

    @pytest.mark.asyncio
    async def test_search_across_antimeridian(self, db, users, make_house):
        # ~14 miles apart on the equator, on opposite sides of ±180°
        await make_house(users.admin, title="Fiji side", latitude=0.0, longitude=179.9)
        await make_house(users.admin, title="Samoa side", latitude=0.0, longitude=-179.95)
        await make_house(users.admin, title="Greenwich", latitude=0.0, longitude=0.0)

        geocoder = MagicMock()
        geocoder.geocode = AsyncMock(return_value=Coordinates(0.0, -179.9))

        houses = await HouseService.get_houses_in_radius(db, geocoder, "96799", 50)

        assert sorted(h.title for h in houses) == ["Fiji side", "Samoa side"]

    @pytest.mark.asyncio
    async def test_unknown_zip(self, db, users):
        geocoder = MagicMock()
        geocoder.geocode = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await HouseService.get_houses_in_radius(db, geocoder, "00000", 10)

    @pytest.mark.asyncio
    async def test_geocoder_failure_propagates(self, db, users):
        geocoder = MagicMock()
        geocoder.geocode = AsyncMock(side_effect=UpstreamError("down"))

        with pytest.raises(UpstreamError):
            await HouseService.get_houses_in_radius(db, geocoder, "500001", 10)


class TestPhotoUpload:
    @pytest.fixture
    def upload_settings(self, tmp_path):
        return Settings(file_upload_path=str(tmp_path), max_file_upload=100)

    @pytest.mark.asyncio
    async def test_stores_file_and_records_name(self, db, users, make_house, upload_settings, tmp_path):
        house = await make_house(users.admin)

        name = await HouseService.upload_photo(
            db, upload_settings, house.id, users.admin, b"\x89PNG", "front.png", "image/png"
        )

        assert name == f"photo_{house.id}.png"
        assert (tmp_path / name).read_bytes() == b"\x89PNG"
        stored = await db.execute(select(House.photo).where(House.id == house.id))
        assert stored.scalar_one() == name

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content,filename,content_type",
        [
            (None, None, None),
            (b"text", "notes.txt", "text/plain"),
            (b"x" * 101, "big.jpg", "image/jpeg"),
        ],
    )
    async def test_rejects_bad_uploads(
        self, db, users, make_house, upload_settings, content, filename, content_type
    ):
        house = await make_house(users.admin)

        with pytest.raises(ValidationError):
            await HouseService.upload_photo(
                db, upload_settings, house.id, users.admin, content, filename, content_type
            )
