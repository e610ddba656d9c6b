from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    func,
)

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType


class AmenityCost(Base):
    """Cost and member pricing model of one amenity (1:1 with the amenity)."""

    __tablename__ = "amenity_costs"

    amenity_id = Column(
        UUIDType,
        ForeignKey("amenities.id", ondelete="CASCADE"),
        primary_key=True,
    )
    initial_build_cost = Column(Numeric(18, 2), nullable=False, default=0)
    monthly_fixed_cost = Column(Numeric(18, 2), nullable=False, default=0)
    cost_per_use = Column(Numeric(18, 2), nullable=False, default=0)
    useful_life_years = Column(Integer, nullable=True)
    active_flag = Column(Boolean, nullable=False, default=True)
    in_dues_flag = Column(Boolean, nullable=False, default=True)
    member_cost_per_use = Column(Numeric(18, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "initial_build_cost >= 0 AND monthly_fixed_cost >= 0 AND cost_per_use >= 0",
            name="ck_amenity_costs_non_negative",
        ),
        CheckConstraint(
            "member_cost_per_use >= 0",
            name="ck_amenity_costs_member_cost_non_negative",
        ),
        CheckConstraint(
            "(in_dues_flag AND member_cost_per_use = 0) "
            "OR (NOT in_dues_flag AND member_cost_per_use > 0)",
            name="ck_amenity_costs_in_dues_member_cost",
        ),
    )
