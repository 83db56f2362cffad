from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.core.config import Settings
from homestay.core.errors import UnauthorizedError
from homestay.core.security import decode_access_token
from homestay.database import get_db
from homestay.models import User, UserRole
from homestay.services.geocoding_service import GeocodingService
from homestay.services.pagination import PageParams

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_geocoder(request: Request) -> GeocodingService:
    return request.app.state.geocoder


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the caller from the `Authorization: Bearer <jwt>` header."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authorized to access this route")

    payload = decode_access_token(settings, credentials.credentials)
    if not payload:
        raise UnauthorizedError("Not authorized to access this route")

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise UnauthorizedError("Not authorized to access this route")

    user = await db.get(User, int(user_id))
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the caller must hold one of `roles`."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise UnauthorizedError(
                f"User role {user.role.value} is not authorized to access this route"
            )
        return user

    return checker


def get_page_params(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> PageParams:
    limit = min(limit or settings.default_page_limit, settings.max_page_limit)
    return PageParams(page=page, limit=limit, sort=sort)
