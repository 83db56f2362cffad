from datetime import date
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from homestay.core.errors import NotFoundError, ValidationError
from homestay.domain.calendar import ranges_overlap
from homestay.models import ACTIVE_BOOKING_STATUSES, Booking, House


def overlapping_bookings(
    house_id: int,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
):
    """
    Uncorrelated EXISTS over active bookings of the house that intersect
    [check_in, check_out). Used both for the availability check and as the
    guard of conditional writes, so both see the same predicate.
    """
    other = aliased(Booking, name="other_booking")
    query = select(other.id).where(
        other.house_id == house_id,
        other.status.in_(ACTIVE_BOOKING_STATUSES),
        other.check_in < check_out,
        other.check_out > check_in,
    )
    if exclude_booking_id is not None:
        query = query.where(other.id != exclude_booking_id)

    return exists(query.correlate(None))


class AvailabilityService:
    """Answers whether a house is free for a date range."""

    @staticmethod
    async def is_available(
        db: AsyncSession,
        house_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """
        True if no pending/confirmed booking of the house overlaps the range.
        Cancelled bookings do not block dates.
        """
        if check_in >= check_out:
            raise ValidationError("check_out must be after check_in")

        house = await db.get(House, house_id)
        if house is None:
            raise NotFoundError("House not found")

        result = await db.execute(
            select(overlapping_bookings(house_id, check_in, check_out, exclude_booking_id))
        )
        return not result.scalar()

    @staticmethod
    async def conflicting_bookings(
        db: AsyncSession,
        house_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> list[Booking]:
        """Active bookings of the house that clash with [check_in, check_out), by check-in."""
        stmt = select(Booking).where(
            Booking.house_id == house_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)

        result = await db.execute(stmt.order_by(Booking.check_in))
        return [
            booking
            for booking in result.scalars()
            if ranges_overlap(check_in, check_out, booking.check_in, booking.check_out)
        ]
