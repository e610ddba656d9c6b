"""Monthly summary schemas.

``MonthlySummaryCreate`` is the candidate row handed to the grain validator.
It deliberately carries no range constraints of its own: structural checks
belong to the validator, which reports them per row instead of raising.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from clubrollup.models.monthly_summary import UsageStatus, ValueSource


class MonthlySummaryCreate(BaseModel):
    NON_NEGATIVE_FIELDS: ClassVar[tuple[str, ...]] = (
        "total_usage_count",
        "unique_member_count",
        "total_operating_cost",
        "total_member_spend",
        "total_revenue",
        "operating_cost_per_use",
    )

    amenity_id: UUID
    year: int
    month: int
    month_start_date: date
    total_usage_count: int = 0
    unique_member_count: int = 0
    first_use_at: datetime | None = None
    last_use_at: datetime | None = None
    total_operating_cost: Decimal = Decimal("0.00")
    operating_cost_source: ValueSource = ValueSource.ESTIMATED
    total_member_spend: Decimal | None = None
    member_spend_source: ValueSource = ValueSource.ESTIMATED
    total_revenue: Decimal | None = None
    operating_cost_per_use: Decimal | None = None
    usage_status: UsageStatus = UsageStatus.UNDERUTILIZED
    watchlist_flag: bool = False

    @property
    def entity_id(self) -> UUID:
        return self.amenity_id

    @property
    def period_key(self) -> tuple[UUID, int, int]:
        return (self.amenity_id, self.year, self.month)


class MonthlySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    amenity_id: UUID
    year: int
    month: int
    month_start_date: date
    total_usage_count: int
    unique_member_count: int
    first_use_at: datetime | None
    last_use_at: datetime | None
    total_operating_cost: Decimal
    operating_cost_source: str
    total_member_spend: Decimal | None
    member_spend_source: str
    total_revenue: Decimal | None
    operating_cost_per_use: Decimal | None
    usage_status: str
    watchlist_flag: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SummaryActualsUpdate(BaseModel):
    """Actual figures reported by finance for one amenity-month.

    A field left as ``None`` keeps its current provenance.
    """

    operating_cost: Decimal | None = Field(default=None, ge=0)
    member_spend: Decimal | None = Field(default=None, ge=0)
