from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.api.deps import (
    get_current_user,
    get_geocoder,
    get_page_params,
    get_settings,
    require_roles,
)
from homestay.core.config import Settings
from homestay.database import get_db
from homestay.models import User, UserRole
from homestay.schemas.common import ApiResponse
from homestay.schemas.house import HouseCreate, HouseFilter, HouseOut, HouseUpdate
from homestay.services.geocoding_service import GeocodingService
from homestay.services.house_service import HouseService
from homestay.services.pagination import PageParams

router = APIRouter(prefix="/api/houses", tags=["houses"])


@router.get(
    "",
    response_model=ApiResponse[list[HouseOut]],
    response_model_exclude_none=True,
)
async def list_houses(
    filters: Annotated[HouseFilter, Query()],
    params: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
):
    """Search houses; newest first unless `sort` says otherwise."""
    houses, _total, pagination = await HouseService.search_houses(db, filters, params)
    return ApiResponse(
        data=[HouseOut.model_validate(h) for h in houses],
        count=len(houses),
        pagination=pagination,
    )


@router.get(
    "/radius/{zipcode}/{distance}",
    response_model=ApiResponse[list[HouseOut]],
    response_model_exclude_none=True,
)
async def houses_in_radius(
    zipcode: str,
    distance: float = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
    geocoder: GeocodingService = Depends(get_geocoder),
):
    """Houses within `distance` miles of the postal code."""
    houses = await HouseService.get_houses_in_radius(db, geocoder, zipcode, distance)
    return ApiResponse(
        data=[HouseOut.model_validate(h) for h in houses], count=len(houses)
    )


@router.get("/{house_id}", response_model=ApiResponse[HouseOut], response_model_exclude_none=True)
async def get_house(house_id: int, db: AsyncSession = Depends(get_db)):
    house = await HouseService.get_house(db, house_id)
    return ApiResponse(data=HouseOut.model_validate(house))


@router.post(
    "",
    response_model=ApiResponse[HouseOut],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_house(
    payload: HouseCreate,
    user: User = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    house = await HouseService.create_house(db, payload, user)
    return ApiResponse(data=HouseOut.model_validate(house))


@router.put("/{house_id}", response_model=ApiResponse[HouseOut], response_model_exclude_none=True)
async def update_house(
    house_id: int,
    payload: HouseUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    house = await HouseService.update_house(db, house_id, payload, user)
    return ApiResponse(data=HouseOut.model_validate(house))


@router.delete("/{house_id}", response_model=ApiResponse[dict], response_model_exclude_none=True)
async def delete_house(
    house_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await HouseService.delete_house(db, house_id, user)
    return ApiResponse(data={})


@router.put("/{house_id}/photo", response_model=ApiResponse[str], response_model_exclude_none=True)
async def upload_house_photo(
    house_id: int,
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # One byte past the cap is enough to reject an oversized file
    content = await file.read(settings.max_file_upload + 1) if file is not None else None
    name = await HouseService.upload_photo(
        db,
        settings,
        house_id,
        user,
        content=content,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
    )
    return ApiResponse(data=name)
