"""AmenityMonthlySummary model: one recomputed rollup per amenity and calendar month."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class ValueSource(str, Enum):
    ACTUAL = "actual"
    ESTIMATED = "estimated"


class UsageStatus(str, Enum):
    IN_USE = "In Use"
    UNDERUTILIZED = "Underutilized"


class AmenityMonthlySummary(Base):
    __tablename__ = "amenity_monthly_summaries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    amenity_id = Column(
        UUIDType,
        ForeignKey("amenities.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    month_start_date = Column(Date, nullable=False)
    total_usage_count = Column(Integer, nullable=False, default=0)
    unique_member_count = Column(Integer, nullable=False, default=0)
    first_use_at = Column(DateTime, nullable=True)
    last_use_at = Column(DateTime, nullable=True)
    total_operating_cost = Column(Numeric(18, 2), nullable=False, default=0)
    operating_cost_source = Column(
        String(20), nullable=False, default=ValueSource.ESTIMATED.value
    )
    total_member_spend = Column(Numeric(18, 2), nullable=True)
    member_spend_source = Column(
        String(20), nullable=False, default=ValueSource.ESTIMATED.value
    )
    total_revenue = Column(Numeric(18, 2), nullable=True)
    operating_cost_per_use = Column(Numeric(18, 2), nullable=True)
    usage_status = Column(String(20), nullable=False, default=UsageStatus.UNDERUTILIZED.value)
    watchlist_flag = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "amenity_id",
            "year",
            "month",
            name="uq_amenity_monthly_summary_amenity_year_month",
        ),
        CheckConstraint(
            "month >= 1 AND month <= 12",
            name="ck_amenity_monthly_summary_month",
        ),
        CheckConstraint(
            "total_usage_count >= 0 AND unique_member_count >= 0",
            name="ck_amenity_monthly_summary_counts_non_negative",
        ),
        CheckConstraint(
            "total_operating_cost >= 0",
            name="ck_amenity_monthly_summary_cost_non_negative",
        ),
        CheckConstraint(
            "total_member_spend IS NULL OR total_member_spend >= 0",
            name="ck_amenity_monthly_summary_spend_non_negative",
        ),
    )
