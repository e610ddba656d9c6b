from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator


class AmenityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    active_flag: bool = True


class AmenityCostCreate(BaseModel):
    initial_build_cost: Decimal = Field(default=Decimal("0"), ge=0)
    monthly_fixed_cost: Decimal = Field(default=Decimal("0"), ge=0)
    cost_per_use: Decimal = Field(default=Decimal("0"), ge=0)
    useful_life_years: int | None = Field(default=None, ge=0)
    active_flag: bool = True
    in_dues_flag: bool = True
    member_cost_per_use: Decimal = Field(default=Decimal("0"), ge=0)

    @model_validator(mode="after")
    def validate_member_price_matches_dues(self) -> Self:
        """Amenities included in dues are free to members; pay-per-use ones are not."""
        if self.in_dues_flag and self.member_cost_per_use != 0:
            raise ValueError("member_cost_per_use must be 0 when in_dues_flag is true")
        if not self.in_dues_flag and self.member_cost_per_use <= 0:
            raise ValueError("member_cost_per_use must be positive when in_dues_flag is false")
        return self
