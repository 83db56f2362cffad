from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class HouseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    price: Decimal = Field(..., gt=0)
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    images: list[str] = []
    amenities: list[str] = []
    is_available: bool = True
    location: Location = Location()


class HouseCreate(HouseBase):
    pass


class HouseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    price: Optional[Decimal] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    images: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    is_available: Optional[bool] = None
    location: Optional[Location] = None

    # owner_id, photo and created_at are not editable through this payload
    model_config = ConfigDict(extra="forbid")


class HouseOut(HouseBase):
    id: int
    owner_id: int
    photo: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HouseSummary(BaseModel):
    id: int
    title: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class HouseFilter(BaseModel):
    """Search criteria for the house listing; every bound is optional."""

    price_min: Optional[Decimal] = Field(None, ge=0)
    price_max: Optional[Decimal] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)  # minimum
    bathrooms: Optional[int] = Field(None, ge=0)  # minimum
    location: Optional[str] = None  # substring of address/city/state/zip
    is_available: Optional[bool] = None
