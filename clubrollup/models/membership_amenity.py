from sqlalchemy import Boolean, Column, ForeignKey, Integer

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType


class MembershipAmenity(Base):
    """Entitlement bridge: which amenities a membership tier includes."""

    __tablename__ = "membership_amenities"

    membership_id = Column(
        UUIDType,
        ForeignKey("memberships.id", ondelete="CASCADE"),
        primary_key=True,
    )
    amenity_id = Column(
        UUIDType,
        ForeignKey("amenities.id", ondelete="CASCADE"),
        primary_key=True,
    )
    included_flag = Column(Boolean, nullable=False, default=True)
    guest_allowance_count = Column(Integer, nullable=True)
