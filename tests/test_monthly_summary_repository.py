"""Tests for the summary store and engagement repositories."""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from clubrollup.core.errors import IntegrityViolation
from clubrollup.models.monthly_summary import UsageStatus, ValueSource
from clubrollup.repositories.member_engagement_repository import MemberEngagementRepository
from clubrollup.repositories.monthly_summary_repository import MonthlySummaryRepository
from clubrollup.schemas.member_engagement import MemberEngagementCreate
from clubrollup.schemas.monthly_summary import MonthlySummaryCreate
from tests.conftest import count_summaries, create_amenity, create_enrollments


@pytest.fixture
def pool(db_session):
    return create_amenity(db_session, "Pool")


def _summary(amenity_id: UUID, **overrides) -> MonthlySummaryCreate:
    values = {
        "amenity_id": amenity_id,
        "year": 2026,
        "month": 3,
        "month_start_date": date(2026, 3, 1),
        "total_usage_count": 15,
        "unique_member_count": 10,
        "total_operating_cost": Decimal("245.00"),
        "total_member_spend": Decimal("60.00"),
        "operating_cost_per_use": Decimal("16.33"),
        "usage_status": UsageStatus.IN_USE,
    }
    values.update(overrides)
    return MonthlySummaryCreate(**values)


class TestMonthlySummaryRepository:
    def test_upsert_inserts(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        row = repo.upsert(_summary(pool.id))
        assert row.id is not None
        assert row.total_usage_count == 15
        assert row.usage_status == "In Use"
        assert row.operating_cost_source == ValueSource.ESTIMATED.value
        assert Decimal(str(row.total_operating_cost)) == Decimal("245.00")

    def test_upsert_replaces_in_place(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        first = repo.upsert(_summary(pool.id))
        second = repo.upsert(_summary(pool.id, total_usage_count=16))
        assert second.id == first.id
        assert second.total_usage_count == 16
        assert count_summaries(db_session, pool.id, 2026, 3) == 1

    def test_upsert_same_row_twice_is_idempotent(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        first = repo.upsert(_summary(pool.id))
        snapshot = (first.id, first.total_usage_count, Decimal(str(first.total_operating_cost)))
        second = repo.upsert(_summary(pool.id))
        assert (
            second.id,
            second.total_usage_count,
            Decimal(str(second.total_operating_cost)),
        ) == snapshot

    def test_constraint_failure_raises_integrity_violation(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        with pytest.raises(IntegrityViolation) as exc_info:
            repo.upsert(_summary(pool.id, month=13))
        assert exc_info.value.period_key == (pool.id, 2026, 13)
        assert exc_info.value.code == "INTEGRITY_VIOLATION"
        assert repo.get_by_key(pool.id, 2026, 13) is None

    def test_get_for_window(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        repo.upsert(_summary(pool.id))
        repo.upsert(_summary(pool.id, month=4, month_start_date=date(2026, 4, 1)))
        repo.upsert(_summary(pool.id, month=5, month_start_date=date(2026, 5, 1)))
        rows = repo.get_for_window(date(2026, 3, 1), date(2026, 5, 1))
        assert [r.month for r in rows] == [3, 4]
        assert repo.get_for_window(date(2026, 3, 1), date(2026, 6, 1), amenity_ids=[uuid4()]) == []

    def test_get_by_key_for_update_reloads_session_state(self, db_session, pool):
        repo = MonthlySummaryRepository(db_session)
        row = repo.upsert(_summary(pool.id))
        row.total_usage_count = 99

        locked = repo.get_by_key_for_update(pool.id, 2026, 3)
        assert locked is row
        assert locked.total_usage_count == 15
        assert repo.get_by_key_for_update(pool.id, 2026, 4) is None
        db_session.rollback()


class TestMemberEngagementRepository:
    def test_upsert_replaces_in_place(self, db_session):
        (enrollment,) = create_enrollments(db_session, 1)
        repo = MemberEngagementRepository(db_session)
        data = MemberEngagementCreate(
            membership_enrollment_id=enrollment.id,
            customer_id=enrollment.customer_id,
            membership_id=enrollment.membership_id,
            year=2026,
            month=3,
            month_start_date=date(2026, 3, 1),
            usage_count=3,
            distinct_amenities_used=2,
        )
        first = repo.upsert(data)
        second = repo.upsert(data.model_copy(update={"usage_count": 4}))
        assert second.id == first.id
        assert second.usage_count == 4
        (row,) = repo.get_for_window(date(2026, 3, 1), date(2026, 4, 1))
        assert UUID(str(row.membership_enrollment_id)) == UUID(str(enrollment.id))
        assert row.employee_flag is False

    def test_filter_by_customer(self, db_session):
        enrollments = create_enrollments(db_session, 2)
        repo = MemberEngagementRepository(db_session)
        for enrollment in enrollments:
            repo.upsert(
                MemberEngagementCreate(
                    membership_enrollment_id=enrollment.id,
                    customer_id=enrollment.customer_id,
                    membership_id=enrollment.membership_id,
                    year=2026,
                    month=3,
                    month_start_date=date(2026, 3, 1),
                    usage_count=1,
                    distinct_amenities_used=1,
                )
            )
        rows = repo.get_for_window(date(2026, 3, 1), date(2026, 4, 1), customer_id="cust-001")
        assert [r.customer_id for r in rows] == ["cust-001"]
