from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, func

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class Membership(Base):
    """Membership tier offered by the club."""

    __tablename__ = "memberships"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    description = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False)
    monthly_dues_amount = Column(Numeric(10, 2), nullable=True)
    monthly_minimum_spend = Column(Numeric(10, 2), nullable=True)
    initiation_fee = Column(Numeric(10, 2), nullable=True)
    age_min = Column(Integer, nullable=True)
    age_max = Column(Integer, nullable=True)
    requires_sponsor_flag = Column(Boolean, nullable=False, default=True)
    capacity = Column(Integer, nullable=True)
    active_flag = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
