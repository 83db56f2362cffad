from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.api.deps import get_current_user, get_page_params
from homestay.database import get_db
from homestay.models import User
from homestay.schemas.booking import BookingCreate, BookingOut, BookingUpdate
from homestay.schemas.common import ApiResponse
from homestay.services.booking_service import BookingService
from homestay.services.pagination import PageParams

router = APIRouter(prefix="/api", tags=["bookings"])


@router.get(
    "/bookings",
    response_model=ApiResponse[list[BookingOut]],
    response_model_exclude_none=True,
)
async def list_bookings(
    params: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Caller's own bookings; admins get every booking."""
    bookings, _total, pagination = await BookingService.list_bookings(db, user, params)
    return ApiResponse(
        data=[BookingOut.model_validate(b) for b in bookings],
        count=len(bookings),
        pagination=pagination,
    )


@router.get(
    "/houses/{house_id}/bookings",
    response_model=ApiResponse[list[BookingOut]],
    response_model_exclude_none=True,
)
async def list_house_bookings(
    house_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    bookings = await BookingService.list_house_bookings(db, house_id)
    return ApiResponse(
        data=[BookingOut.model_validate(b) for b in bookings], count=len(bookings)
    )


@router.post(
    "/houses/{house_id}/bookings",
    response_model=ApiResponse[BookingOut],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    house_id: int,
    payload: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await BookingService.create_booking(db, house_id, user, payload)
    return ApiResponse(data=BookingOut.model_validate(booking))


@router.get(
    "/bookings/{booking_id}",
    response_model=ApiResponse[BookingOut],
    response_model_exclude_none=True,
)
async def get_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await BookingService.get_booking(db, booking_id, user, include_house=True)
    return ApiResponse(data=BookingOut.model_validate(booking))


@router.put(
    "/bookings/{booking_id}",
    response_model=ApiResponse[BookingOut],
    response_model_exclude_none=True,
)
async def update_booking(
    booking_id: int,
    payload: BookingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await BookingService.update_booking(db, booking_id, user, payload)
    return ApiResponse(data=BookingOut.model_validate(booking))


@router.delete(
    "/bookings/{booking_id}",
    response_model=ApiResponse[dict],
    response_model_exclude_none=True,
)
async def delete_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await BookingService.delete_booking(db, booking_id, user)
    return ApiResponse(data={})
