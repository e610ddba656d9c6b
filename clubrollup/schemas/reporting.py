"""Read-projection schemas consumed by reporting clients."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class AmenityPerformanceRow(BaseModel):
    amenity_id: UUID
    amenity_name: str
    amenity_category: str
    year: int
    month: int
    month_start_date: date
    total_usage_count: int
    unique_member_count: int
    total_operating_cost: Decimal
    operating_cost_source: str
    total_member_spend: Decimal | None
    member_spend_source: str
    total_revenue: Decimal | None
    operating_cost_per_use: Decimal | None
    usage_status: str
    watchlist: bool


class DailyUsageRow(BaseModel):
    usage_day: date
    year: int
    month: int
    month_name: str
    day_name: str
    is_weekend: bool
    amenity_id: UUID
    amenity_name: str
    amenity_category: str
    usage_count: int
    unique_members: int


class PeakTimeRow(BaseModel):
    amenity_id: UUID
    amenity_name: str
    amenity_category: str
    day_name: str
    iso_day_of_week: int
    usage_hour: int
    usage_count: int
    unique_members: int


class AmenityProfitabilityRow(BaseModel):
    amenity_id: UUID
    amenity_name: str
    amenity_category: str
    initial_build_cost: Decimal | None
    monthly_fixed_cost: Decimal | None
    cost_per_use: Decimal | None
    useful_life_years: int | None
    total_usage_count: int
    total_variable_cost: Decimal
    total_operating_cost: Decimal
    operating_cost_per_use: Decimal | None
    total_member_spend: Decimal
    total_revenue: Decimal
    usage_status: str


class RevenueActualsRow(BaseModel):
    year: int
    month: int
    month_name: str
    month_start_date: date
    charge_type: str
    invoice_count: int
    total_amount_billed: Decimal
    total_amount_paid: Decimal
    total_outstanding_balance: Decimal
