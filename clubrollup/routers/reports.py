from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clubrollup.core.database import get_db
from clubrollup.core.errors import InvalidRecomputeWindow
from clubrollup.schemas.member_engagement import MemberEngagementResponse
from clubrollup.schemas.reporting import (
    AmenityPerformanceRow,
    AmenityProfitabilityRow,
    DailyUsageRow,
    PeakTimeRow,
    RevenueActualsRow,
)
from clubrollup.services.classifier import ClassifierThresholds
from clubrollup.services.reporting_service import ReportingService

router = APIRouter()

MonthWindow = tuple[tuple[int, int], tuple[int, int]]


def month_window(
    start_year: int = Query(..., ge=1900, le=9999),
    start_month: int = Query(..., ge=1, le=12),
    end_year: int = Query(..., ge=1900, le=9999),
    end_month: int = Query(..., ge=1, le=12),
) -> MonthWindow:
    """Inclusive range of calendar months taken from the query string."""
    start, end = (start_year, start_month), (end_year, end_month)
    if start > end:
        raise InvalidRecomputeWindow("start month must not be after end month")
    return start, end


@router.get("/performance", response_model=list[AmenityPerformanceRow])
async def get_monthly_performance(
    window: MonthWindow = Depends(month_window),
    amenity_id: list[UUID] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[AmenityPerformanceRow]:
    """Monthly summaries joined with amenity names and labels."""
    return ReportingService(db).monthly_performance(*window, amenity_ids=amenity_id)


@router.get("/watchlist", response_model=list[AmenityPerformanceRow])
async def get_watchlist(
    window: MonthWindow = Depends(month_window),
    usage_ceiling: int | None = Query(default=None, ge=0),
    cost_floor: Decimal | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
) -> list[AmenityPerformanceRow]:
    """Underused amenity-months that still cost at least the floor."""
    thresholds = ClassifierThresholds.from_settings()
    if usage_ceiling is not None:
        thresholds.underuse_usage_ceiling = usage_ceiling
    if cost_floor is not None:
        thresholds.underuse_cost_floor = cost_floor
    return ReportingService(db).watchlist(*window, thresholds=thresholds)


@router.get("/daily_usage", response_model=list[DailyUsageRow])
async def get_daily_usage(
    window: MonthWindow = Depends(month_window),
    amenity_id: list[UUID] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[DailyUsageRow]:
    return ReportingService(db).daily_usage(*window, amenity_ids=amenity_id)


@router.get("/peak_times", response_model=list[PeakTimeRow])
async def get_peak_times(
    window: MonthWindow = Depends(month_window),
    amenity_id: list[UUID] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[PeakTimeRow]:
    return ReportingService(db).peak_times(*window, amenity_ids=amenity_id)


@router.get("/profitability", response_model=list[AmenityProfitabilityRow])
async def get_profitability(
    window: MonthWindow = Depends(month_window),
    db: Session = Depends(get_db),
) -> list[AmenityProfitabilityRow]:
    return ReportingService(db).profitability(*window)


@router.get("/revenue", response_model=list[RevenueActualsRow])
async def get_revenue_actuals(
    window: MonthWindow = Depends(month_window),
    db: Session = Depends(get_db),
) -> list[RevenueActualsRow]:
    """Billed, paid and outstanding totals per month and charge type."""
    return ReportingService(db).revenue_actuals(*window)


@router.get("/engagement", response_model=list[MemberEngagementResponse])
async def get_member_engagement(
    window: MonthWindow = Depends(month_window),
    customer_id: str | None = None,
    db: Session = Depends(get_db),
) -> list[MemberEngagementResponse]:
    return ReportingService(db).member_engagement(*window, customer_id=customer_id)
