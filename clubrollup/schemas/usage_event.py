from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, field_validator


class UsageEventCreate(BaseModel):
    membership_enrollment_id: UUID
    amenity_id: UUID
    usage_timestamp: datetime

    @field_validator("usage_timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime:
        if isinstance(v, datetime):
            return v
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                pass
        raise ValueError("Invalid timestamp format. Use ISO 8601 format.")
