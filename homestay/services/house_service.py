import asyncio
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.core.config import Settings
from homestay.core.errors import NotFoundError, UnauthorizedError, UpstreamError, ValidationError
from homestay.domain.calendar import bounding_box, distance_miles, longitude_ranges
from homestay.models import Booking, House, User, UserRole
from homestay.schemas.common import Pagination
from homestay.schemas.house import HouseCreate, HouseFilter, HouseUpdate
from homestay.services.geocoding_service import GeocodingService
from homestay.services.pagination import PageParams, paginate

logger = logging.getLogger(__name__)

HOUSE_SORT_FIELDS = {
    "created_at": House.created_at,
    "price": House.price,
    "title": House.title,
    "bedrooms": House.bedrooms,
    "bathrooms": House.bathrooms,
}

LOCATION_FIELDS = ("latitude", "longitude", "address", "city", "state", "zip_code")


def _authorize(house: House, user: User, action: str) -> None:
    if house.owner_id != user.id and user.role != UserRole.ADMIN:
        raise UnauthorizedError(f"Not authorized to {action} this house")


def _flatten(data: dict) -> dict:
    """Spread the nested location payload onto the house columns."""
    location = data.pop("location", None)
    if location:
        for key in LOCATION_FIELDS:
            if key in location:
                data[key] = location[key]
    return data


def build_house_conditions(filters: HouseFilter) -> list:
    conditions = []
    if filters.price_min is not None:
        conditions.append(House.price >= filters.price_min)
    if filters.price_max is not None:
        conditions.append(House.price <= filters.price_max)
    if filters.bedrooms is not None:
        conditions.append(House.bedrooms >= filters.bedrooms)
    if filters.bathrooms is not None:
        conditions.append(House.bathrooms >= filters.bathrooms)
    if filters.is_available is not None:
        conditions.append(House.is_available == filters.is_available)
    if filters.location:
        term = filters.location.strip()
        # autoescape: % and _ in the term match literally
        conditions.append(
            or_(
                House.address.icontains(term, autoescape=True),
                House.city.icontains(term, autoescape=True),
                House.state.icontains(term, autoescape=True),
                House.zip_code.icontains(term, autoescape=True),
            )
        )
    return conditions


class HouseService:
    @staticmethod
    async def search_houses(
        db: AsyncSession, filters: HouseFilter, params: PageParams
    ) -> tuple[list[House], int, Pagination]:
        stmt = select(House).where(*build_house_conditions(filters))
        return await paginate(db, stmt, params, HOUSE_SORT_FIELDS)

    @staticmethod
    async def get_house(db: AsyncSession, house_id: int) -> House:
        house = await db.get(House, house_id)
        if house is None:
            raise NotFoundError("House not found")
        return house

    @staticmethod
    async def create_house(db: AsyncSession, house_in: HouseCreate, owner: User) -> House:
        data = _flatten(house_in.model_dump())
        db_house = House(**data, owner_id=owner.id)
        db.add(db_house)
        await db.commit()
        await db.refresh(db_house)
        logger.info(f"House #{db_house.id} '{db_house.title}' created by user {owner.id}")
        return db_house

    @staticmethod
    async def update_house(
        db: AsyncSession, house_id: int, house_in: HouseUpdate, user: User
    ) -> House:
        db_house = await HouseService.get_house(db, house_id)
        _authorize(db_house, user, "update")

        # model_dump(exclude_unset=True) keeps this a partial update
        update_data = house_in.model_dump(exclude_unset=True)
        for key in ("title", "description", "price", "bedrooms", "bathrooms", "is_available"):
            if key in update_data and update_data[key] is None:
                raise ValidationError(f"{key} cannot be null")

        for key, value in _flatten(update_data).items():
            if key in ("images", "amenities") and value is None:
                value = []
            setattr(db_house, key, value)

        await db.commit()
        await db.refresh(db_house)
        return db_house

    @staticmethod
    async def delete_house(db: AsyncSession, house_id: int, user: User) -> None:
        db_house = await HouseService.get_house(db, house_id)
        _authorize(db_house, user, "delete")

        # The house's bookings go with it; nothing else references them
        await db.execute(delete(Booking).where(Booking.house_id == house_id))
        await db.execute(delete(House).where(House.id == house_id))
        await db.commit()
        logger.info(f"House #{house_id} deleted by user {user.id}")

    @staticmethod
    async def get_houses_in_radius(
        db: AsyncSession,
        geocoder: GeocodingService,
        zip_code: str,
        distance: float,
    ) -> list[House]:
        """Houses within `distance` miles of the postal code's centre."""
        if distance <= 0:
            raise ValidationError("distance must be greater than 0")

        center = await geocoder.geocode(zip_code)
        if center is None:
            raise NotFoundError(f"Could not locate zipcode {zip_code}")

        min_lat, max_lat, min_lng, max_lng = bounding_box(
            center.latitude, center.longitude, distance
        )
        # A box crossing the ±180° meridian becomes two longitude bands
        lng_bands = [
            House.longitude.between(lo, hi) for lo, hi in longitude_ranges(min_lng, max_lng)
        ]
        stmt = select(House).where(
            House.latitude.is_not(None),
            House.longitude.is_not(None),
            House.latitude.between(min_lat, max_lat),
            or_(*lng_bands),
        )
        candidates = (await db.execute(stmt)).scalars().all()

        return [
            house
            for house in candidates
            if distance_miles(center.latitude, center.longitude, house.latitude, house.longitude)
            <= distance
        ]

    @staticmethod
    async def upload_photo(
        db: AsyncSession,
        settings: Settings,
        house_id: int,
        user: User,
        content: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str],
    ) -> str:
        db_house = await HouseService.get_house(db, house_id)
        _authorize(db_house, user, "update")

        if not content or not filename:
            raise ValidationError("Please upload a file")
        if not (content_type or "").startswith("image"):
            raise ValidationError("Please upload an image file")
        if len(content) > settings.max_file_upload:
            raise ValidationError(
                f"Please upload an image less than {settings.max_file_upload}"
            )

        name = f"photo_{db_house.id}{Path(filename).suffix}"
        target = Path(settings.file_upload_path) / name

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Failed to store photo for house #{house_id}: {e}", exc_info=True)
            raise UpstreamError("Problem with file upload") from e

        db_house.photo = name
        await db.commit()
        logger.info(f"Photo {name} stored for house #{house_id}")
        return name
