from sqlalchemy import Boolean, Column, DateTime, String, func

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class Amenity(Base):
    """Club amenity catalog entry (pool, spa, simulator bay, ...)."""

    __tablename__ = "amenities"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    category = Column(String(100), nullable=False)
    active_flag = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
