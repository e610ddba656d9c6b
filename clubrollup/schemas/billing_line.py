from datetime import date
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from clubrollup.models.billing_line import ChargeType


class BillingLineCreate(BaseModel):
    invoice_number: str = Field(..., min_length=1, max_length=50)
    line_number: int = Field(..., ge=1)
    invoice_date: date
    membership_enrollment_id: UUID
    charge_type: ChargeType
    charge_sub_type: str | None = Field(default=None, max_length=50)
    amenity_id: UUID | None = None
    quantity: Decimal = Field(default=Decimal("1"), ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    billing_period_start: date | None = None
    billing_period_end: date | None = None
    paid_date: date | None = None
    is_voided: bool = False
    is_refund: bool = False
    is_comped: bool = False
    source_system: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def validate_amenity_charge(self) -> Self:
        if self.charge_type == ChargeType.AMENITY and self.amenity_id is None:
            raise ValueError("amenity_id is required for AMENITY charges")
        return self

    @model_validator(mode="after")
    def validate_billing_period(self) -> Self:
        if (
            self.billing_period_start is not None
            and self.billing_period_end is not None
            and self.billing_period_start > self.billing_period_end
        ):
            raise ValueError("billing_period_start must not be after billing_period_end")
        return self
