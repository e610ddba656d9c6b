from datetime import date
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class MembershipCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    monthly_dues_amount: Decimal | None = Field(default=None, ge=0)
    monthly_minimum_spend: Decimal | None = Field(default=None, ge=0)
    initiation_fee: Decimal | None = Field(default=None, ge=0)
    age_min: int | None = Field(default=None, ge=0)
    age_max: int | None = Field(default=None, ge=0)
    requires_sponsor_flag: bool = True
    capacity: int | None = Field(default=None, ge=0)
    active_flag: bool = True


class MembershipAmenityCreate(BaseModel):
    membership_id: UUID
    amenity_id: UUID
    included_flag: bool = True
    guest_allowance_count: int | None = Field(default=None, ge=0)


class CustomerMembershipCreate(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=255)
    membership_id: UUID
    join_date: date
    renewal_date: date
    active_flag: bool = True
    employee_flag: bool = False

    @model_validator(mode="after")
    def validate_renewal_after_join(self) -> Self:
        if self.renewal_date < self.join_date:
            raise ValueError("renewal_date must not be before join_date")
        return self
