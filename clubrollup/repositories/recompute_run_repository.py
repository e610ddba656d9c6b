from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from clubrollup.models.recompute_run import RecomputeRun
from clubrollup.models.shared import utc_now
from clubrollup.schemas.recompute import RecomputeReport


class RecomputeRunRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, run_id: UUID) -> RecomputeRun | None:
        return self.db.query(RecomputeRun).filter(RecomputeRun.id == run_id).first()

    def get_recent(self, limit: int = 20) -> list[RecomputeRun]:
        return (
            self.db.query(RecomputeRun)
            .order_by(RecomputeRun.started_at.desc())
            .limit(limit)
            .all()
        )

    def record(self, report: RecomputeReport, started_at: datetime) -> RecomputeRun:
        run = RecomputeRun(
            status=report.status,
            window_start=report.window_start,
            window_end=report.window_end,
            periods_committed=report.periods_committed,
            periods_skipped=report.periods_skipped,
            rows_rejected=report.rows_rejected,
            warnings_count=len(report.warnings),
            error_code=report.error_code,
            error_message=report.error_message,
            details={
                "skipped": [s.model_dump() for s in report.skipped],
                "rejected": [r.model_dump() for r in report.rejected],
                "warnings": [w.model_dump() for w in report.warnings],
            },
            started_at=started_at,
            finished_at=utc_now(),
        )
        self.db.add(run)
        self.db.commit()
        self.db.refresh(run)
        return run
