from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class MemberMonthlyEngagement(Base):
    """Materialized member-month usage read model. Fully recomputable from usage events."""

    __tablename__ = "member_monthly_engagements"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    membership_enrollment_id = Column(
        UUIDType,
        ForeignKey("customer_memberships.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    customer_id = Column(String(255), nullable=False)
    membership_id = Column(UUIDType, nullable=False)
    employee_flag = Column(Boolean, nullable=False, default=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    month_start_date = Column(Date, nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    distinct_amenities_used = Column(Integer, nullable=False, default=0)
    first_use_at = Column(DateTime, nullable=True)
    last_use_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "membership_enrollment_id",
            "year",
            "month",
            name="uq_member_monthly_engagement_enrollment_year_month",
        ),
        CheckConstraint(
            "month >= 1 AND month <= 12",
            name="ck_member_monthly_engagement_month",
        ),
        CheckConstraint(
            "usage_count >= 0 AND distinct_amenities_used >= 0",
            name="ck_member_monthly_engagement_counts_non_negative",
        ),
    )
