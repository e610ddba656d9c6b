"""Tests for usage aggregation and month helpers."""

import random
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest

from clubrollup.services.period_dates import (
    add_months,
    iter_months,
    month_bounds,
    to_club_time,
    window_bounds,
)
from clubrollup.services.usage_aggregation import (
    CALENDAR_DATE_MISSING,
    EnrollmentRef,
    ReferenceWindow,
    UsageEventRecord,
    aggregate,
    aggregate_engagement,
)

POOL = uuid4()
SPA = uuid4()
MEMBERS = [uuid4() for _ in range(10)]
MEMBERSHIP = uuid4()


def _calendar(year: int, month: int) -> frozenset[date]:
    start, stop = month_bounds(year, month)
    return frozenset(start + timedelta(days=i) for i in range((stop - start).days))


def _window(**overrides) -> ReferenceWindow:
    values = {
        "calendar_dates": _calendar(2026, 2) | _calendar(2026, 3),
        "amenity_ids": frozenset({POOL, SPA}),
        "enrollments": {
            m: EnrollmentRef(customer_id=f"cust-{i:03d}", membership_id=MEMBERSHIP)
            for i, m in enumerate(MEMBERS)
        },
    }
    values.update(overrides)
    return ReferenceWindow(**values)


def _event(amenity: UUID, member: UUID, ts: datetime) -> UsageEventRecord:
    return UsageEventRecord(
        event_id=uuid4(),
        membership_enrollment_id=member,
        amenity_id=amenity,
        usage_timestamp=ts,
    )


def _march_pool_events(count: int) -> list[UsageEventRecord]:
    return [
        _event(POOL, MEMBERS[i % len(MEMBERS)], datetime(2026, 3, 1 + i, 9, 0))
        for i in range(count)
    ]


class TestPeriodDates:
    def test_add_months_across_year(self):
        assert add_months(2026, 12, 1) == (2027, 1)
        assert add_months(2026, 1, -1) == (2025, 12)
        assert add_months(2026, 3, -14) == (2025, 1)

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))
        assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2027, 1, 1))

    def test_iter_months_inclusive(self):
        assert list(iter_months((2025, 11), (2026, 2))) == [
            (2025, 11),
            (2025, 12),
            (2026, 1),
            (2026, 2),
        ]

    def test_window_bounds(self):
        assert window_bounds((2026, 1), (2026, 3)) == (date(2026, 1, 1), date(2026, 4, 1))

    def test_to_club_time_keeps_naive(self):
        ts = datetime(2026, 3, 31, 23, 30)
        assert to_club_time(ts, ZoneInfo("America/New_York")) == ts

    def test_to_club_time_converts_aware(self):
        ts = datetime(2026, 4, 1, 2, 30, tzinfo=UTC)
        local = to_club_time(ts, ZoneInfo("America/New_York"))
        assert local == datetime(2026, 3, 31, 22, 30)
        assert local.tzinfo is None


class TestAggregate:
    def test_counts_uses_and_distinct_members(self):
        result = aggregate(_march_pool_events(15), _window())
        assert len(result.aggregates) == 1
        period = result.aggregates[0]
        assert period.period_key == (POOL, 2026, 3)
        assert period.total_usage_count == 15
        assert period.unique_member_count == 10
        assert period.first_use_at == datetime(2026, 3, 1, 9, 0)
        assert period.last_use_at == datetime(2026, 3, 15, 9, 0)
        assert period.month_start_date == date(2026, 3, 1)
        assert result.warnings == []

    def test_groups_by_amenity_and_month(self):
        events = _march_pool_events(3) + [
            _event(SPA, MEMBERS[0], datetime(2026, 3, 2, 10, 0)),
            _event(POOL, MEMBERS[1], datetime(2026, 2, 28, 23, 59)),
        ]
        keys = [a.period_key for a in aggregate(events, _window()).aggregates]
        assert sorted(keys, key=str) == sorted(
            [(POOL, 2026, 3), (SPA, 2026, 3), (POOL, 2026, 2)], key=str
        )
        assert keys[0] == (POOL, 2026, 2)

    def test_result_is_independent_of_event_order(self):
        events = _march_pool_events(15) + [_event(SPA, MEMBERS[2], datetime(2026, 2, 3, 7, 0))]
        shuffled = list(events)
        random.Random(7).shuffle(shuffled)
        assert aggregate(events, _window()).aggregates == aggregate(shuffled, _window()).aggregates

    def test_late_event_is_reflected_on_recompute(self):
        events = _march_pool_events(15)
        late = _event(POOL, MEMBERS[0], datetime(2026, 3, 20, 18, 0))
        before = aggregate(events, _window()).aggregates[0]
        after = aggregate(events + [late], _window()).aggregates[0]
        assert before.total_usage_count == 15
        assert after.total_usage_count == 16
        assert after.period_key == before.period_key

    def test_excludes_unknown_amenity_with_warning(self):
        stray = _event(uuid4(), MEMBERS[0], datetime(2026, 3, 5, 9, 0))
        result = aggregate(_march_pool_events(2) + [stray], _window())
        assert result.aggregates[0].total_usage_count == 2
        assert len(result.warnings) == 1
        assert result.warnings[0].code == "REFERENCE_NOT_FOUND"
        assert result.warnings[0].event_id == str(stray.event_id)

    def test_excludes_unknown_enrollment_with_warning(self):
        stray = _event(POOL, uuid4(), datetime(2026, 3, 5, 9, 0))
        result = aggregate([stray], _window())
        assert result.aggregates == []
        assert "membership enrollment" in result.warnings[0].detail

    def test_excludes_events_without_calendar_row(self):
        events = _march_pool_events(2)
        result = aggregate(events, _window(calendar_dates=frozenset({date(2026, 3, 1)})))
        assert result.aggregates[0].total_usage_count == 1
        assert result.warnings[0].code == CALENDAR_DATE_MISSING

    def test_aware_timestamps_bucket_in_club_time(self):
        event = _event(POOL, MEMBERS[0], datetime(2026, 4, 1, 2, 30, tzinfo=UTC))
        result = aggregate([event], _window(timezone=ZoneInfo("America/New_York")))
        assert result.aggregates[0].period_key == (POOL, 2026, 3)
        assert result.aggregates[0].first_use_at == datetime(2026, 3, 31, 22, 30)

    def test_no_events_gives_no_aggregates(self):
        result = aggregate([], _window())
        assert result.aggregates == []
        assert result.warnings == []


class TestAggregateEngagement:
    def test_member_month_counts(self):
        member = MEMBERS[3]
        events = [
            _event(POOL, member, datetime(2026, 3, 1, 9, 0)),
            _event(POOL, member, datetime(2026, 3, 2, 9, 0)),
            _event(SPA, member, datetime(2026, 3, 9, 17, 0)),
            _event(SPA, MEMBERS[4], datetime(2026, 3, 9, 17, 0)),
        ]
        result = aggregate_engagement(events, _window())
        by_member = {a.membership_enrollment_id: a for a in result.aggregates}
        row = by_member[member]
        assert row.usage_count == 3
        assert row.distinct_amenities_used == 2
        assert row.customer_id == "cust-003"
        assert row.membership_id == MEMBERSHIP
        assert row.first_use_at == datetime(2026, 3, 1, 9, 0)
        assert row.last_use_at == datetime(2026, 3, 9, 17, 0)
        assert by_member[MEMBERS[4]].usage_count == 1

    def test_carries_employee_flag(self):
        staff = MEMBERS[5]
        enrollments = dict(_window().enrollments)
        enrollments[staff] = EnrollmentRef(
            customer_id="cust-005", membership_id=MEMBERSHIP, employee_flag=True
        )
        events = [
            _event(POOL, staff, datetime(2026, 3, 4, 6, 30)),
            _event(POOL, MEMBERS[6], datetime(2026, 3, 4, 6, 45)),
        ]
        result = aggregate_engagement(events, _window(enrollments=enrollments))
        flags = {a.membership_enrollment_id: a.employee_flag for a in result.aggregates}
        assert flags == {staff: True, MEMBERS[6]: False}

    @pytest.mark.parametrize("month", [2, 3])
    def test_splits_by_month(self, month):
        member = MEMBERS[0]
        events = [
            _event(POOL, member, datetime(2026, 2, 27, 9, 0)),
            _event(POOL, member, datetime(2026, 3, 2, 9, 0)),
        ]
        result = aggregate_engagement(events, _window())
        rows = [a for a in result.aggregates if a.month == month]
        assert len(rows) == 1
        assert rows[0].usage_count == 1
