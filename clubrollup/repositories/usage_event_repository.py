import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from clubrollup.models.usage_event import UsageEvent
from clubrollup.schemas.usage_event import UsageEventCreate
from clubrollup.services.period_dates import as_datetime, to_club_time

logger = logging.getLogger(__name__)


class UsageEventRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_in_window(
        self,
        from_timestamp: datetime,
        to_timestamp: datetime,
        amenity_ids: Iterable[UUID] | None = None,
        enrollment_ids: Iterable[UUID] | None = None,
    ) -> list[UsageEvent]:
        """Events with ``from_timestamp <= usage_timestamp < to_timestamp``."""
        query = self.db.query(UsageEvent).filter(
            UsageEvent.usage_timestamp >= from_timestamp,
            UsageEvent.usage_timestamp < to_timestamp,
        )
        if amenity_ids is not None:
            query = query.filter(UsageEvent.amenity_id.in_(list(amenity_ids)))
        if enrollment_ids is not None:
            query = query.filter(UsageEvent.membership_enrollment_id.in_(list(enrollment_ids)))
        return query.order_by(UsageEvent.usage_timestamp, UsageEvent.id).all()

    def get_in_club_window(
        self,
        start_date: date,
        stop_date: date,
        timezone: ZoneInfo | None,
        amenity_ids: Iterable[UUID] | None = None,
    ) -> list[tuple[UsageEvent, datetime]]:
        """Events whose club-time date is within ``[start_date, stop_date)``.

        Each event comes with its club wall-clock time. The store is read a day
        wider on each side, since aware timestamps can change date once converted.
        """
        events = self.get_in_window(
            as_datetime(start_date - timedelta(days=1)),
            as_datetime(stop_date + timedelta(days=1)),
            amenity_ids=amenity_ids,
        )
        matched = []
        for event in events:
            local_time = to_club_time(event.usage_timestamp, timezone)  # type: ignore[arg-type]
            if start_date <= local_time.date() < stop_date:
                matched.append((event, local_time))
        return matched

    def create(self, data: UsageEventCreate) -> UsageEvent:
        event = UsageEvent(
            membership_enrollment_id=data.membership_enrollment_id,
            amenity_id=data.amenity_id,
            usage_timestamp=data.usage_timestamp,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def create_batch(self, events_data: list[UsageEventCreate]) -> list[UsageEvent]:
        events = [
            UsageEvent(
                membership_enrollment_id=data.membership_enrollment_id,
                amenity_id=data.amenity_id,
                usage_timestamp=data.usage_timestamp,
            )
            for data in events_data
        ]
        self.db.add_all(events)
        self.db.commit()
        for event in events:
            self.db.refresh(event)
        logger.debug("Stored %d usage events", len(events))
        return events
