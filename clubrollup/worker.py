import logging
from datetime import datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from arq import cron

from clubrollup.core.config import settings
from clubrollup.core.database import SessionLocal
from clubrollup.schemas.recompute import RecomputeRequest
from clubrollup.services.monthly_summary_service import MonthlySummaryService
from clubrollup.services.period_dates import add_months
from clubrollup.tasks import redis_settings

logger = logging.getLogger(__name__)


async def recompute_monthly_summaries_task(ctx: dict[str, Any]) -> int:
    """Background task: recompute the current month and the lookback months before it.

    Runs nightly. Every active amenity gets a row, used or not, so idle
    amenities show up on the watchlist.
    """
    now = datetime.now(ZoneInfo(settings.CLUB_TIMEZONE))
    start_year, start_month = add_months(
        now.year, now.month, -max(0, settings.RECOMPUTE_LOOKBACK_MONTHS)
    )
    db = SessionLocal()
    try:
        service = MonthlySummaryService(db)
        report = service.recompute(
            RecomputeRequest(
                start_year=start_year,
                start_month=start_month,
                end_year=now.year,
                end_month=now.month,
                include_idle_amenities=True,
            )
        )
        if report.status != "completed":
            logger.warning(
                "Nightly recompute %s: %s", report.status, report.error_message or "no detail"
            )
        return report.periods_committed
    finally:
        db.close()


async def recompute_window_task(
    ctx: dict[str, Any],
    start_year: int,
    start_month: int,
    end_year: int,
    end_month: int,
    amenity_ids: list[str] | None = None,
) -> int:
    """Background task: recompute an arbitrary month window on demand."""
    db = SessionLocal()
    try:
        service = MonthlySummaryService(db)
        report = service.recompute(
            RecomputeRequest(
                start_year=start_year,
                start_month=start_month,
                end_year=end_year,
                end_month=end_month,
                amenity_ids=[UUID(a) for a in amenity_ids] if amenity_ids is not None else None,
            )
        )
        logger.info(
            "Recomputed %04d-%02d..%04d-%02d: %d committed, %d skipped, %d rejected",
            start_year,
            start_month,
            end_year,
            end_month,
            report.periods_committed,
            report.periods_skipped,
            report.rows_rejected,
        )
        return report.periods_committed
    finally:
        db.close()


class WorkerSettings:
    functions = [
        recompute_monthly_summaries_task,
        recompute_window_task,
    ]
    cron_jobs = [
        cron(recompute_monthly_summaries_task, hour=2, minute=0),  # nightly
    ]
    redis_settings = redis_settings
