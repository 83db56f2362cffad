from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from homestay.models import BookingStatus, PaymentStatus
from homestay.schemas.house import HouseSummary


class BookingCreate(BaseModel):
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def validate_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    total_price: Optional[Decimal] = Field(None, ge=0)

    # house_id and user_id are fixed at creation
    model_config = ConfigDict(extra="forbid")


class BookingOut(BaseModel):
    id: int
    house_id: int
    user_id: int
    check_in: date
    check_out: date
    total_price: Decimal
    status: BookingStatus
    payment_status: PaymentStatus
    created_at: datetime

    # Only populated when the caller asks for house details
    house: Optional[HouseSummary] = Field(
        None, validation_alias=AliasChoices("house_details", "house")
    )

    model_config = ConfigDict(from_attributes=True)
