"""
Availability checks against persisted bookings
"""
from datetime import date

import pytest

from homestay.core.errors import NotFoundError, ValidationError
from homestay.models import BookingStatus
from homestay.services.availability_service import AvailabilityService


@pytest.mark.asyncio
async def test_free_house_is_available(db, users, make_house):
    house = await make_house(users.admin)

    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 1), date(2024, 6, 5)
    )


@pytest.mark.asyncio
async def test_overlap_with_confirmed_booking_blocks(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    await make_booking(house, users.alice, date(2024, 6, 1), date(2024, 6, 5))

    assert not await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 3), date(2024, 6, 7)
    )


@pytest.mark.asyncio
async def test_pending_booking_blocks(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    await make_booking(
        house, users.alice, date(2024, 6, 1), date(2024, 6, 5), status=BookingStatus.PENDING
    )

    assert not await AvailabilityService.is_available(
        db, house.id, date(2024, 5, 30), date(2024, 6, 2)
    )


@pytest.mark.asyncio
async def test_touching_ranges_are_available(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    await make_booking(house, users.alice, date(2024, 6, 1), date(2024, 6, 5))

    # Checkout day of one stay is the checkin day of the next
    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 5), date(2024, 6, 8)
    )
    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 5, 28), date(2024, 6, 1)
    )


@pytest.mark.asyncio
async def test_cancelled_booking_frees_dates(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    await make_booking(
        house, users.alice, date(2024, 6, 1), date(2024, 6, 5), status=BookingStatus.CANCELLED
    )

    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 2), date(2024, 6, 4)
    )


@pytest.mark.asyncio
async def test_other_house_bookings_do_not_block(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    other = await make_house(users.admin, title="Other")
    await make_booking(other, users.alice, date(2024, 6, 1), date(2024, 6, 5))

    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 1), date(2024, 6, 5)
    )


@pytest.mark.asyncio
async def test_excluded_booking_is_ignored(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    booking = await make_booking(house, users.alice, date(2024, 6, 1), date(2024, 6, 5))

    assert await AvailabilityService.is_available(
        db, house.id, date(2024, 6, 2), date(2024, 6, 6), exclude_booking_id=booking.id
    )


@pytest.mark.asyncio
async def test_unknown_house_raises_not_found(db, users):
    with pytest.raises(NotFoundError):
        await AvailabilityService.is_available(db, 999, date(2024, 6, 1), date(2024, 6, 5))


@pytest.mark.asyncio
async def test_inverted_range_is_rejected(db, users, make_house):
    house = await make_house(users.admin)

    with pytest.raises(ValidationError):
        await AvailabilityService.is_available(
            db, house.id, date(2024, 6, 5), date(2024, 6, 5)
        )


@pytest.mark.asyncio
async def test_conflicting_bookings_lists_only_active_clashes(db, users, make_house, make_booking):
    house = await make_house(users.admin)
    early = await make_booking(house, users.alice, date(2024, 6, 1), date(2024, 6, 4))
    late = await make_booking(house, users.bob, date(2024, 6, 6), date(2024, 6, 9))
    await make_booking(house, users.bob, date(2024, 6, 9), date(2024, 6, 12))  # touches only
    await make_booking(
        house, users.alice, date(2024, 6, 3), date(2024, 6, 7), status=BookingStatus.CANCELLED
    )

    clashes = await AvailabilityService.conflicting_bookings(
        db, house.id, date(2024, 6, 3), date(2024, 6, 9)
    )
    assert [b.id for b in clashes] == [early.id, late.id]

    without_early = await AvailabilityService.conflicting_bookings(
        db, house.id, date(2024, 6, 3), date(2024, 6, 9), exclude_booking_id=early.id
    )
    assert [b.id for b in without_early] == [late.id]
