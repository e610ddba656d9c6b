import logging
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubrollup.core.errors import IntegrityViolation
from clubrollup.models.member_engagement import MemberMonthlyEngagement
from clubrollup.schemas.member_engagement import MemberEngagementCreate

logger = logging.getLogger(__name__)


class MemberEngagementRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_key(
        self, enrollment_id: UUID, year: int, month: int
    ) -> MemberMonthlyEngagement | None:
        return (
            self.db.query(MemberMonthlyEngagement)
            .filter(
                MemberMonthlyEngagement.membership_enrollment_id == enrollment_id,
                MemberMonthlyEngagement.year == year,
                MemberMonthlyEngagement.month == month,
            )
            .first()
        )

    def get_for_window(
        self,
        start_date: date,
        end_date: date,
        customer_id: str | None = None,
    ) -> list[MemberMonthlyEngagement]:
        query = self.db.query(MemberMonthlyEngagement).filter(
            MemberMonthlyEngagement.month_start_date >= start_date,
            MemberMonthlyEngagement.month_start_date < end_date,
        )
        if customer_id is not None:
            query = query.filter(MemberMonthlyEngagement.customer_id == customer_id)
        return query.order_by(
            MemberMonthlyEngagement.month_start_date,
            MemberMonthlyEngagement.customer_id,
        ).all()

    def upsert(self, data: MemberEngagementCreate) -> MemberMonthlyEngagement:
        """Insert or replace the engagement row of one (enrollment, year, month).

        Raises:
            IntegrityViolation: the database refused the write.
        """
        values = data.model_dump()
        record = self.get_by_key(data.membership_enrollment_id, data.year, data.month)
        if record is None:
            record = MemberMonthlyEngagement(**values)
            self.db.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Engagement upsert rejected for %s: %s", data.period_key, exc.orig)
            raise IntegrityViolation(data.period_key, str(exc.orig)) from exc
        self.db.refresh(record)
        return record
