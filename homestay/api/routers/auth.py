from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.api.deps import get_current_user, get_settings
from homestay.core.config import Settings
from homestay.core.rate_limiter import AUTH_RATE_LIMIT, limiter
from homestay.core.security import create_access_token
from homestay.database import get_db
from homestay.models import User
from homestay.schemas.common import ApiResponse, TokenResponse
from homestay.schemas.user import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserOut,
)
from homestay.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(settings: Settings, user: User) -> TokenResponse:
    token = create_access_token(
        settings, data={"sub": str(user.id), "role": user.role.value}
    )
    return TokenResponse(token=token)


@router.post("/register", response_model=TokenResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await UserService.register(db, payload)
    return _token_response(settings, user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await UserService.authenticate(db, payload.email, payload.password)
    return _token_response(settings, user)


@router.get("/me", response_model=ApiResponse[UserOut])
async def me(user: User = Depends(get_current_user)):
    return ApiResponse(data=UserOut.model_validate(user))


@router.put("/updatedetails", response_model=ApiResponse[UserOut])
async def update_details(
    payload: UpdateDetailsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService.update_details(db, user, payload)
    return ApiResponse(data=UserOut.model_validate(user))


@router.put("/updatepassword", response_model=TokenResponse)
async def update_password(
    payload: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await UserService.update_password(db, user, payload)
    return _token_response(settings, user)
