from sqlalchemy import Column, DateTime, ForeignKey, Index, func

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class UsageEvent(Base):
    """One recorded use of an amenity by an enrolled member. Append-only."""

    __tablename__ = "usage_events"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    membership_enrollment_id = Column(
        UUIDType,
        ForeignKey("customer_memberships.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amenity_id = Column(
        UUIDType,
        ForeignKey("amenities.id", ondelete="RESTRICT"),
        nullable=False,
    )
    usage_timestamp = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_usage_events_usage_timestamp", "usage_timestamp"),
        Index("ix_usage_events_amenity_timestamp", "amenity_id", "usage_timestamp"),
        Index(
            "ix_usage_events_enrollment_timestamp",
            "membership_enrollment_id",
            "usage_timestamp",
        ),
    )
