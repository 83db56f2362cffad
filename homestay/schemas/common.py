from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageLink(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
    count: Optional[int] = None
    pagination: Optional[Pagination] = None


class TokenResponse(BaseModel):
    success: bool = True
    token: str
