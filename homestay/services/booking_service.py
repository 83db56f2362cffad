import logging

from sqlalchemy import insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from homestay.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from homestay.domain.calendar import nights_between
from homestay.models import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    House,
    PaymentStatus,
    User,
    UserRole,
    utcnow,
)
from homestay.schemas.booking import BookingCreate, BookingUpdate
from homestay.schemas.common import Pagination
from homestay.services.availability_service import AvailabilityService, overlapping_bookings
from homestay.services.pagination import PageParams, paginate

logger = logging.getLogger(__name__)

BOOKING_SORT_FIELDS = {
    "created_at": Booking.created_at,
    "check_in": Booking.check_in,
    "check_out": Booking.check_out,
    "total_price": Booking.total_price,
    "status": Booking.status,
}


def _authorize(booking: Booking, user: User, action: str) -> None:
    """Only the booking's user or an admin may touch it."""
    if booking.user_id != user.id and user.role != UserRole.ADMIN:
        raise UnauthorizedError(f"Not authorized to {action} this booking")


class BookingService:
    """Booking lifecycle: creation with overlap guard, scoped reads, authorized changes."""

    @staticmethod
    async def create_booking(
        db: AsyncSession, house_id: int, user: User, booking_in: BookingCreate
    ) -> Booking:
        """
        Create a pending booking.

        The availability check gives the early, readable failure; the insert
        itself is conditional on the same overlap predicate, so two concurrent
        requests for clashing dates cannot both be persisted.
        """
        house = await db.get(House, house_id)
        if house is None:
            raise NotFoundError("House not found")
        if not house.is_available:
            raise ValidationError("House is not accepting bookings")

        check_in, check_out = booking_in.check_in, booking_in.check_out
        if check_in >= check_out:
            raise ValidationError("check_out must be after check_in")

        total_price = nights_between(check_in, check_out) * house.price

        if not await AvailabilityService.is_available(db, house_id, check_in, check_out):
            clashes = await AvailabilityService.conflicting_bookings(
                db, house_id, check_in, check_out
            )
            logger.warning(
                f"Cannot create booking: dates {check_in} - {check_out} "
                f"not available for house {house_id}, "
                f"held by bookings {[b.id for b in clashes]}"
            )
            raise ConflictError()

        table = Booking.__table__
        cols = table.c
        values = select(
            literal(house_id, cols.house_id.type),
            literal(user.id, cols.user_id.type),
            literal(check_in, cols.check_in.type),
            literal(check_out, cols.check_out.type),
            literal(total_price, cols.total_price.type),
            literal(BookingStatus.PENDING, cols.status.type),
            literal(PaymentStatus.PENDING, cols.payment_status.type),
            literal(utcnow(), cols.created_at.type),
        ).where(~overlapping_bookings(house_id, check_in, check_out))

        stmt = (
            insert(table)
            .from_select(
                [
                    "house_id",
                    "user_id",
                    "check_in",
                    "check_out",
                    "total_price",
                    "status",
                    "payment_status",
                    "created_at",
                ],
                values,
            )
            .returning(cols.id)
        )
        booking_id = (await db.execute(stmt)).scalar_one_or_none()
        await db.commit()

        if booking_id is None:
            # Lost the race against a concurrent booking for the same dates
            logger.warning(
                f"Booking insert for house {house_id} ({check_in} - {check_out}) "
                f"rejected by overlap guard"
            )
            raise ConflictError()

        booking = await db.get(Booking, booking_id)
        logger.info(
            f"Booking #{booking_id} created: house {house_id}, user {user.id}, "
            f"{check_in} - {check_out}, total {total_price}"
        )
        return booking

    @staticmethod
    async def get_booking(
        db: AsyncSession, booking_id: int, user: User, include_house: bool = True
    ) -> Booking:
        stmt = select(Booking).where(Booking.id == booking_id)
        if include_house:
            stmt = stmt.options(joinedload(Booking.house))
        booking = (await db.execute(stmt)).scalar_one_or_none()

        if booking is None:
            raise NotFoundError("Booking not found")
        _authorize(booking, user, "access")
        return booking

    @staticmethod
    async def list_house_bookings(db: AsyncSession, house_id: int) -> list[Booking]:
        """All bookings of a house; not filtered by caller."""
        stmt = (
            select(Booking)
            .where(Booking.house_id == house_id)
            .order_by(Booking.check_in)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_bookings(
        db: AsyncSession, user: User, params: PageParams
    ) -> tuple[list[Booking], int, Pagination]:
        """Admins see every booking; everyone else only their own."""
        stmt = select(Booking)
        if user.role != UserRole.ADMIN:
            stmt = stmt.where(Booking.user_id == user.id)
        return await paginate(db, stmt, params, BOOKING_SORT_FIELDS)

    @staticmethod
    async def update_booking(
        db: AsyncSession, booking_id: int, user: User, patch: BookingUpdate
    ) -> Booking:
        """
        Apply a partial patch, re-checking date order and, for an active result,
        the calendar against every other active booking of the house.

        A conflict rolls the session back before raising `ConflictError`, which
        expires every object loaded in it; reload them before further use.
        """
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        _authorize(booking, user, "update")
        house_id = booking.house_id

        data = patch.model_dump(exclude_unset=True)
        for field in ("status", "payment_status", "check_in", "check_out", "total_price"):
            if field in data and data[field] is None:
                raise ValidationError(f"{field} cannot be null")
        if not data:
            return booking

        check_in = data.get("check_in", booking.check_in)
        check_out = data.get("check_out", booking.check_out)
        status = data.get("status", booking.status)
        if check_in >= check_out:
            raise ValidationError("check_out must be after check_in")

        table = Booking.__table__
        stmt = update(table).where(table.c.id == booking_id).values(**data)

        if status in ACTIVE_BOOKING_STATUSES:
            # Re-check the calendar against every other active booking
            stmt = stmt.where(
                ~overlapping_bookings(
                    house_id, check_in, check_out, exclude_booking_id=booking_id
                )
            )

        result = await db.execute(stmt)
        if result.rowcount == 0:
            await db.rollback()
            clashes = await AvailabilityService.conflicting_bookings(
                db, house_id, check_in, check_out, exclude_booking_id=booking_id
            )
            logger.warning(
                f"Update of booking #{booking_id} rejected: {check_in} - {check_out} "
                f"overlaps bookings {[b.id for b in clashes]}"
            )
            raise ConflictError()

        await db.commit()
        await db.refresh(booking)
        logger.info(f"Booking #{booking_id} updated by user {user.id}: {sorted(data)}")
        return booking

    @staticmethod
    async def delete_booking(db: AsyncSession, booking_id: int, user: User) -> None:
        """Permanent removal; there is no undo."""
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        _authorize(booking, user, "delete")

        logger.info(
            f"Deleting booking #{booking_id} "
            f"(house {booking.house_id}, {booking.check_in} - {booking.check_out})"
        )
        await db.delete(booking)
        await db.commit()
