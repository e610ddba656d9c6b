"""Summary store: the durable monthly rollup table downstream reporting reads."""

import logging
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubrollup.core.errors import IntegrityViolation
from clubrollup.models.monthly_summary import AmenityMonthlySummary
from clubrollup.schemas.monthly_summary import MonthlySummaryCreate

logger = logging.getLogger(__name__)


class MonthlySummaryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_key(self, amenity_id: UUID, year: int, month: int) -> AmenityMonthlySummary | None:
        return (
            self.db.query(AmenityMonthlySummary)
            .filter(
                AmenityMonthlySummary.amenity_id == amenity_id,
                AmenityMonthlySummary.year == year,
                AmenityMonthlySummary.month == month,
            )
            .first()
        )

    def get_by_key_for_update(
        self, amenity_id: UUID, year: int, month: int
    ) -> AmenityMonthlySummary | None:
        """Current row of one key, locked until the session's next commit or rollback.

        Rows already in the session are overwritten with what the store holds now.
        """
        return (
            self.db.query(AmenityMonthlySummary)
            .filter(
                AmenityMonthlySummary.amenity_id == amenity_id,
                AmenityMonthlySummary.year == year,
                AmenityMonthlySummary.month == month,
            )
            .populate_existing()
            .with_for_update()
            .first()
        )

    def get_for_window(
        self,
        start_date: date,
        end_date: date,
        amenity_ids: Iterable[UUID] | None = None,
    ) -> list[AmenityMonthlySummary]:
        """Summaries whose month starts within ``start_date <= month_start_date < end_date``."""
        query = self.db.query(AmenityMonthlySummary).filter(
            AmenityMonthlySummary.month_start_date >= start_date,
            AmenityMonthlySummary.month_start_date < end_date,
        )
        if amenity_ids is not None:
            query = query.filter(AmenityMonthlySummary.amenity_id.in_(list(amenity_ids)))
        return query.order_by(
            AmenityMonthlySummary.month_start_date,
            AmenityMonthlySummary.amenity_id,
        ).all()

    def upsert(self, data: MonthlySummaryCreate) -> AmenityMonthlySummary:
        """Insert or replace the summary of one (amenity, year, month).

        An existing row keeps its identity and has every field overwritten.

        Raises:
            IntegrityViolation: the database refused the write.
        """
        values = data.model_dump()
        values["operating_cost_source"] = data.operating_cost_source.value
        values["member_spend_source"] = data.member_spend_source.value
        values["usage_status"] = data.usage_status.value

        record = self.get_by_key(data.amenity_id, data.year, data.month)
        if record is None:
            record = AmenityMonthlySummary(**values)
            self.db.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Summary upsert rejected for %s: %s", data.period_key, exc.orig)
            raise IntegrityViolation(data.period_key, str(exc.orig)) from exc
        self.db.refresh(record)
        return record

