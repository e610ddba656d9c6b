from enum import Enum

from sqlalchemy import JSON, Column, Date, DateTime, Integer, String, func

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class RecomputeRunStatus(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class RecomputeRun(Base):
    """Outcome of one recomputation run, kept for operators."""

    __tablename__ = "recompute_runs"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    status = Column(String(20), nullable=False)
    window_start = Column(Date, nullable=False)
    window_end = Column(Date, nullable=False)
    periods_committed = Column(Integer, nullable=False, default=0)
    periods_skipped = Column(Integer, nullable=False, default=0)
    rows_rejected = Column(Integer, nullable=False, default=0)
    warnings_count = Column(Integer, nullable=False, default=0)
    error_code = Column(String(50), nullable=True)
    error_message = Column(String(4000), nullable=True)
    details = Column(JSON, nullable=False, default=dict)
    started_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
