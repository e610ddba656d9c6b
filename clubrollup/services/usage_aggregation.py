"""Aggregation of raw usage events into per-period values.

Every call derives the full value of each period from the events it is given.
Nothing is incremented in place, so replaying the same events (in any order)
yields identical aggregates.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from clubrollup.core.errors import ReferenceNotFound
from clubrollup.models.usage_event import UsageEvent
from clubrollup.schemas.recompute import DataQualityWarning
from clubrollup.services.period_dates import first_day, to_club_time

logger = logging.getLogger(__name__)

CALENDAR_DATE_MISSING = "CALENDAR_DATE_MISSING"


@dataclass(frozen=True)
class UsageEventRecord:
    """Detached, immutable copy of a usage event."""

    event_id: UUID
    membership_enrollment_id: UUID
    amenity_id: UUID
    usage_timestamp: datetime

    @classmethod
    def from_model(cls, event: UsageEvent) -> "UsageEventRecord":
        return cls(
            event_id=UUID(str(event.id)),
            membership_enrollment_id=UUID(str(event.membership_enrollment_id)),
            amenity_id=UUID(str(event.amenity_id)),
            usage_timestamp=event.usage_timestamp,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class EnrollmentRef:
    customer_id: str
    membership_id: UUID
    employee_flag: bool = False


@dataclass(frozen=True)
class ReferenceWindow:
    """Reference data an aggregation run resolves events against."""

    calendar_dates: frozenset[date]
    amenity_ids: frozenset[UUID]
    enrollments: Mapping[UUID, EnrollmentRef]
    timezone: ZoneInfo | None = None


@dataclass(frozen=True)
class PeriodAggregate:
    amenity_id: UUID
    year: int
    month: int
    total_usage_count: int
    unique_member_count: int
    first_use_at: datetime | None
    last_use_at: datetime | None

    @property
    def period_key(self) -> tuple[UUID, int, int]:
        return (self.amenity_id, self.year, self.month)

    @property
    def month_start_date(self) -> date:
        return first_day(self.year, self.month)

    @classmethod
    def empty(cls, amenity_id: UUID, year: int, month: int) -> "PeriodAggregate":
        return cls(amenity_id, year, month, 0, 0, None, None)


@dataclass(frozen=True)
class EngagementAggregate:
    membership_enrollment_id: UUID
    customer_id: str
    membership_id: UUID
    year: int
    month: int
    usage_count: int
    distinct_amenities_used: int
    first_use_at: datetime | None
    last_use_at: datetime | None
    employee_flag: bool = False

    @property
    def period_key(self) -> tuple[UUID, int, int]:
        return (self.membership_enrollment_id, self.year, self.month)


@dataclass
class AggregationResult:
    aggregates: list = field(default_factory=list)
    warnings: list[DataQualityWarning] = field(default_factory=list)


@dataclass(frozen=True)
class _ScreenedEvent:
    event: UsageEventRecord
    local_time: datetime


def _screen_events(
    events: Iterable[UsageEventRecord],
    window: ReferenceWindow,
) -> tuple[list[_ScreenedEvent], list[DataQualityWarning]]:
    """Drop events that do not resolve against the reference window."""
    accepted: list[_ScreenedEvent] = []
    warnings: list[DataQualityWarning] = []

    for event in events:
        problem: str | None = None
        code = ReferenceNotFound.code
        if event.amenity_id not in window.amenity_ids:
            problem = str(ReferenceNotFound("amenity", event.amenity_id))
        elif event.membership_enrollment_id not in window.enrollments:
            problem = str(
                ReferenceNotFound("membership enrollment", event.membership_enrollment_id)
            )

        local_time = to_club_time(event.usage_timestamp, window.timezone)
        if problem is None and local_time.date() not in window.calendar_dates:
            code = CALENDAR_DATE_MISSING
            problem = f"no calendar row for {local_time.date()}"

        if problem is not None:
            logger.warning("Excluding usage event %s: %s", event.event_id, problem)
            warnings.append(
                DataQualityWarning(code=code, detail=problem, event_id=str(event.event_id))
            )
            continue
        accepted.append(_ScreenedEvent(event=event, local_time=local_time))

    return accepted, warnings


def aggregate(
    events: Iterable[UsageEventRecord],
    reference_window: ReferenceWindow,
) -> AggregationResult:
    """Group events by (amenity, calendar year, calendar month).

    Returns one PeriodAggregate per distinct key, sorted by (year, month,
    amenity id), plus a warning for every excluded event.
    """
    screened, warnings = _screen_events(events, reference_window)

    groups: dict[tuple[UUID, int, int], list[_ScreenedEvent]] = defaultdict(list)
    for item in screened:
        key = (item.event.amenity_id, item.local_time.year, item.local_time.month)
        groups[key].append(item)

    aggregates = [
        PeriodAggregate(
            amenity_id=amenity_id,
            year=year,
            month=month,
            total_usage_count=len(items),
            unique_member_count=len({i.event.membership_enrollment_id for i in items}),
            first_use_at=min(i.local_time for i in items),
            last_use_at=max(i.local_time for i in items),
        )
        for (amenity_id, year, month), items in groups.items()
    ]
    aggregates.sort(key=lambda a: (a.year, a.month, str(a.amenity_id)))
    return AggregationResult(aggregates=aggregates, warnings=warnings)


def aggregate_engagement(
    events: Iterable[UsageEventRecord],
    reference_window: ReferenceWindow,
) -> AggregationResult:
    """Group events by (membership enrollment, calendar year, calendar month)."""
    screened, warnings = _screen_events(events, reference_window)

    groups: dict[tuple[UUID, int, int], list[_ScreenedEvent]] = defaultdict(list)
    for item in screened:
        key = (item.event.membership_enrollment_id, item.local_time.year, item.local_time.month)
        groups[key].append(item)

    aggregates = []
    for (enrollment_id, year, month), items in groups.items():
        enrollment = reference_window.enrollments[enrollment_id]
        aggregates.append(
            EngagementAggregate(
                membership_enrollment_id=enrollment_id,
                customer_id=enrollment.customer_id,
                membership_id=enrollment.membership_id,
                year=year,
                month=month,
                usage_count=len(items),
                distinct_amenities_used=len({i.event.amenity_id for i in items}),
                first_use_at=min(i.local_time for i in items),
                last_use_at=max(i.local_time for i in items),
                employee_flag=enrollment.employee_flag,
            )
        )
    aggregates.sort(key=lambda a: (a.year, a.month, str(a.membership_enrollment_id)))
    return AggregationResult(aggregates=aggregates, warnings=warnings)
