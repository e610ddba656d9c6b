from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from clubrollup.core.database import get_db
from clubrollup.models.monthly_summary import AmenityMonthlySummary
from clubrollup.models.recompute_run import RecomputeRun
from clubrollup.repositories.monthly_summary_repository import MonthlySummaryRepository
from clubrollup.repositories.recompute_run_repository import RecomputeRunRepository
from clubrollup.routers.reports import MonthWindow, month_window
from clubrollup.schemas.monthly_summary import MonthlySummaryResponse, SummaryActualsUpdate
from clubrollup.schemas.recompute import RecomputeReport, RecomputeRequest, RecomputeRunResponse
from clubrollup.services.monthly_summary_service import MonthlySummaryService
from clubrollup.services.period_dates import window_bounds

router = APIRouter()


@router.post(
    "/recompute",
    response_model=RecomputeReport,
    summary="Recompute monthly summaries",
    responses={422: {"description": "Invalid recompute window"}},
)
async def recompute_summaries(
    data: RecomputeRequest,
    db: Session = Depends(get_db),
) -> RecomputeReport:
    """Recompute every amenity-month of the window from its usage events.

    Always answers 200 with the run report; inspect ``status`` to tell a
    completed run from an aborted or cancelled one.
    """
    return MonthlySummaryService(db).recompute(data)


@router.get("/", response_model=list[MonthlySummaryResponse], summary="List monthly summaries")
async def list_summaries(
    window: MonthWindow = Depends(month_window),
    amenity_id: list[UUID] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[AmenityMonthlySummary]:
    start_date, stop_date = window_bounds(*window)
    return MonthlySummaryRepository(db).get_for_window(start_date, stop_date, amenity_id)


@router.get(
    "/runs",
    response_model=list[RecomputeRunResponse],
    summary="List recent recompute runs",
)
async def list_runs(
    limit: int = Query(default=20, ge=1, le=200),
    db: Session = Depends(get_db),
) -> list[RecomputeRun]:
    return RecomputeRunRepository(db).get_recent(limit=limit)


@router.get(
    "/runs/{run_id}",
    response_model=RecomputeRunResponse,
    summary="Get recompute run",
    responses={404: {"description": "Recompute run not found"}},
)
async def get_run(
    run_id: UUID,
    db: Session = Depends(get_db),
) -> RecomputeRun:
    run = RecomputeRunRepository(db).get_by_id(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Recompute run not found")
    return run


@router.get(
    "/{amenity_id}/{year}/{month}",
    response_model=MonthlySummaryResponse,
    summary="Get monthly summary",
    responses={404: {"description": "Monthly summary not found"}},
)
async def get_summary(
    amenity_id: UUID,
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
) -> AmenityMonthlySummary:
    summary = MonthlySummaryRepository(db).get_by_key(amenity_id, year, month)
    if not summary:
        raise HTTPException(status_code=404, detail="Monthly summary not found")
    return summary


@router.put(
    "/{amenity_id}/{year}/{month}/actuals",
    response_model=MonthlySummaryResponse,
    summary="Record actual figures",
    responses={404: {"description": "Amenity not found"}},
)
async def record_actuals(
    data: SummaryActualsUpdate,
    amenity_id: UUID,
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
) -> AmenityMonthlySummary:
    """Store actual operating cost and/or member spend for one amenity-month.

    The summary is re-derived around the new figures, and later
    recomputations keep them.
    """
    return MonthlySummaryService(db).record_actuals(amenity_id, year, month, data)
