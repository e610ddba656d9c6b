from datetime import date, datetime
from typing import Any, Literal, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

EntityType = Literal["amenity", "member"]


class RecomputeRequest(BaseModel):
    """Inclusive month range to recompute, optionally limited to some amenities."""

    start_year: int = Field(..., ge=1900, le=9999)
    start_month: int = Field(..., ge=1, le=12)
    end_year: int = Field(..., ge=1900, le=9999)
    end_month: int = Field(..., ge=1, le=12)
    amenity_ids: list[UUID] | None = None
    include_idle_amenities: bool = False
    include_engagement: bool = True

    @model_validator(mode="after")
    def validate_window_order(self) -> Self:
        if (self.start_year, self.start_month) > (self.end_year, self.end_month):
            raise ValueError("start month must not be after end month")
        return self


class PeriodRef(BaseModel):
    entity_type: EntityType
    entity_id: str
    year: int
    month: int


class PeriodSkip(PeriodRef):
    reason: str


class RowRejection(PeriodRef):
    code: str
    detail: str


class DataQualityWarning(BaseModel):
    code: str
    detail: str
    event_id: str | None = None


class RecomputeReport(BaseModel):
    run_id: UUID | None = None
    status: Literal["completed", "aborted", "cancelled"]
    window_start: date
    window_end: date
    committed: list[PeriodRef] = Field(default_factory=list)
    skipped: list[PeriodSkip] = Field(default_factory=list)
    rejected: list[RowRejection] = Field(default_factory=list)
    warnings: list[DataQualityWarning] = Field(default_factory=list)
    error_code: str | None = None
    error_message: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def periods_committed(self) -> int:
        return len(self.committed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def periods_skipped(self) -> int:
        return len(self.skipped)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rows_rejected(self) -> int:
        return len(self.rejected)


class RecomputeRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    window_start: date
    window_end: date
    periods_committed: int
    periods_skipped: int
    rows_rejected: int
    warnings_count: int
    error_code: str | None
    error_message: str | None
    details: dict[str, Any]
    started_at: datetime
    finished_at: datetime | None
