import calendar
from datetime import date, datetime
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field


class MemberEngagementCreate(BaseModel):
    NON_NEGATIVE_FIELDS: ClassVar[tuple[str, ...]] = ("usage_count", "distinct_amenities_used")

    membership_enrollment_id: UUID
    customer_id: str
    membership_id: UUID
    employee_flag: bool = False
    year: int
    month: int
    month_start_date: date
    usage_count: int = 0
    distinct_amenities_used: int = 0
    first_use_at: datetime | None = None
    last_use_at: datetime | None = None

    @property
    def entity_id(self) -> UUID:
        return self.membership_enrollment_id

    @property
    def period_key(self) -> tuple[UUID, int, int]:
        return (self.membership_enrollment_id, self.year, self.month)


class MemberEngagementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    membership_enrollment_id: UUID
    customer_id: str
    membership_id: UUID
    employee_flag: bool
    year: int
    month: int
    month_start_date: date
    usage_count: int
    distinct_amenities_used: int
    first_use_at: datetime | None
    last_use_at: datetime | None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]
