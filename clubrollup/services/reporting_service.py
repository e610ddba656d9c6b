"""Read projections over the summary store, usage events and billing lines.

Projections are derived on every call and never stored.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from clubrollup.core.config import settings
from clubrollup.models.amenity import Amenity
from clubrollup.models.monthly_summary import AmenityMonthlySummary
from clubrollup.repositories.amenity_repository import AmenityCostRepository, AmenityRepository
from clubrollup.repositories.billing_line_repository import BillingLineRepository
from clubrollup.repositories.calendar_date_repository import CalendarDateRepository
from clubrollup.repositories.member_engagement_repository import MemberEngagementRepository
from clubrollup.repositories.monthly_summary_repository import MonthlySummaryRepository
from clubrollup.repositories.usage_event_repository import UsageEventRepository
from clubrollup.schemas.member_engagement import MemberEngagementResponse
from clubrollup.schemas.reporting import (
    AmenityPerformanceRow,
    AmenityProfitabilityRow,
    DailyUsageRow,
    PeakTimeRow,
    RevenueActualsRow,
)
from clubrollup.services.classifier import ClassifierThresholds, classify_values
from clubrollup.services.cost_estimator import ZERO, cost_per_use, quantize_money
from clubrollup.services.period_dates import first_day, window_bounds

logger = logging.getLogger(__name__)

Month = tuple[int, int]


class ReportingService:
    """Builds reporting rows for a window of calendar months (inclusive)."""

    def __init__(self, db: Session):
        self.db = db
        self.timezone = ZoneInfo(settings.CLUB_TIMEZONE)
        self.amenity_repo = AmenityRepository(db)
        self.cost_repo = AmenityCostRepository(db)
        self.summary_repo = MonthlySummaryRepository(db)
        self.event_repo = UsageEventRepository(db)
        self.calendar_repo = CalendarDateRepository(db)
        self.billing_repo = BillingLineRepository(db)
        self.engagement_repo = MemberEngagementRepository(db)

    def _amenities(self, amenity_ids: list[UUID] | None = None) -> dict[UUID, Amenity]:
        return {UUID(str(a.id)): a for a in self.amenity_repo.get_all(amenity_ids=amenity_ids)}

    def monthly_performance(
        self,
        start: Month,
        end: Month,
        amenity_ids: list[UUID] | None = None,
    ) -> list[AmenityPerformanceRow]:
        start_date, stop_date = window_bounds(start, end)
        amenities = self._amenities(amenity_ids)
        return [
            _performance_row(summary, amenities[UUID(str(summary.amenity_id))])
            for summary in self.summary_repo.get_for_window(start_date, stop_date, amenity_ids)
        ]

    def watchlist(
        self,
        start: Month,
        end: Month,
        thresholds: ClassifierThresholds | None = None,
    ) -> list[AmenityPerformanceRow]:
        """Performance rows that are watchlisted under ``thresholds``.

        Stored labels reflect the thresholds in force when the row was
        computed; here every row is re-labelled with the given ones.
        """
        thresholds = thresholds or ClassifierThresholds.from_settings()
        flagged = []
        for row in self.monthly_performance(start, end):
            labels = classify_values(row.total_usage_count, row.total_operating_cost, thresholds)
            if labels.watchlist:
                flagged.append(
                    row.model_copy(
                        update={"usage_status": labels.usage_status.value, "watchlist": True}
                    )
                )
        return flagged

    def daily_usage(
        self,
        start: Month,
        end: Month,
        amenity_ids: list[UUID] | None = None,
    ) -> list[DailyUsageRow]:
        """Usage per calendar day and amenity. Days without a calendar row are left out."""
        start_date, stop_date = window_bounds(start, end)
        amenities = self._amenities()
        calendar = self.calendar_repo.get_range(start_date, stop_date)

        groups: dict[tuple, list[UUID]] = defaultdict(list)
        for event, local_time in self.event_repo.get_in_club_window(
            start_date, stop_date, self.timezone, amenity_ids=amenity_ids
        ):
            day = local_time.date()
            if day not in calendar:
                continue
            groups[(day, UUID(str(event.amenity_id)))].append(
                UUID(str(event.membership_enrollment_id))
            )

        rows = []
        ordered = sorted(groups.items(), key=lambda g: (g[0][0], str(g[0][1])))
        for (day, amenity_id), members in ordered:
            calendar_row = calendar[day]
            amenity = amenities[amenity_id]
            rows.append(
                DailyUsageRow(
                    usage_day=day,
                    year=calendar_row.year,
                    month=calendar_row.month,
                    month_name=calendar_row.month_name,
                    day_name=calendar_row.day_name,
                    is_weekend=calendar_row.is_weekend,
                    amenity_id=amenity_id,
                    amenity_name=amenity.name,
                    amenity_category=amenity.category,
                    usage_count=len(members),
                    unique_members=len(set(members)),
                )
            )
        return rows

    def peak_times(
        self,
        start: Month,
        end: Month,
        amenity_ids: list[UUID] | None = None,
    ) -> list[PeakTimeRow]:
        """Usage per amenity, ISO weekday and hour of day (club time)."""
        start_date, stop_date = window_bounds(start, end)
        amenities = self._amenities()

        groups: dict[tuple[UUID, int, str, int], list[UUID]] = defaultdict(list)
        for event, local in self.event_repo.get_in_club_window(
            start_date, stop_date, self.timezone, amenity_ids=amenity_ids
        ):
            amenity_id = UUID(str(event.amenity_id))
            key = (amenity_id, local.isoweekday(), local.strftime("%A"), local.hour)
            groups[key].append(UUID(str(event.membership_enrollment_id)))

        return [
            PeakTimeRow(
                amenity_id=amenity_id,
                amenity_name=amenities[amenity_id].name,
                amenity_category=amenities[amenity_id].category,
                day_name=day_name,
                iso_day_of_week=weekday,
                usage_hour=hour,
                usage_count=len(members),
                unique_members=len(set(members)),
            )
            for (amenity_id, weekday, day_name, hour), members in sorted(
                groups.items(), key=lambda g: (str(g[0][0]), g[0][1], g[0][3])
            )
        ]

    def profitability(self, start: Month, end: Month) -> list[AmenityProfitabilityRow]:
        """Cost, spend and revenue totals per active amenity over the window."""
        start_date, stop_date = window_bounds(start, end)
        amenities = self.amenity_repo.get_all(active_only=True)
        costs = self.cost_repo.get_for_amenities(UUID(str(a.id)) for a in amenities)

        by_amenity: dict[UUID, list[AmenityMonthlySummary]] = defaultdict(list)
        for summary in self.summary_repo.get_for_window(start_date, stop_date):
            by_amenity[UUID(str(summary.amenity_id))].append(summary)

        rows = []
        for amenity in amenities:
            amenity_id = UUID(str(amenity.id))
            cost = costs.get(amenity_id)
            summaries = by_amenity.get(amenity_id, [])

            usage = sum(int(s.total_usage_count) for s in summaries)
            unit_cost = Decimal(str(cost.cost_per_use)) if cost is not None else ZERO
            operating_cost = quantize_money(
                sum((Decimal(str(s.total_operating_cost)) for s in summaries), ZERO)
            )
            member_spend = sum(
                (
                    Decimal(str(s.total_member_spend))
                    for s in summaries
                    if s.total_member_spend is not None
                ),
                ZERO,
            )
            revenue = sum(
                (Decimal(str(s.total_revenue)) for s in summaries if s.total_revenue is not None),
                ZERO,
            )
            rows.append(
                AmenityProfitabilityRow(
                    amenity_id=amenity_id,
                    amenity_name=amenity.name,
                    amenity_category=amenity.category,
                    initial_build_cost=cost.initial_build_cost if cost is not None else None,
                    monthly_fixed_cost=cost.monthly_fixed_cost if cost is not None else None,
                    cost_per_use=cost.cost_per_use if cost is not None else None,
                    useful_life_years=cost.useful_life_years if cost is not None else None,
                    total_usage_count=usage,
                    total_variable_cost=quantize_money(unit_cost * usage),
                    total_operating_cost=operating_cost,
                    operating_cost_per_use=cost_per_use(operating_cost, usage),
                    total_member_spend=quantize_money(member_spend),
                    total_revenue=quantize_money(revenue),
                    usage_status="In Use" if usage > 0 else "Underutilized",
                )
            )
        return rows

    def revenue_actuals(self, start: Month, end: Month) -> list[RevenueActualsRow]:
        """Billed, paid and outstanding totals per invoice month and charge type."""
        start_date, stop_date = window_bounds(start, end)
        calendar = self.calendar_repo.get_range(start_date, stop_date)

        groups: dict[tuple[int, int, str], list] = defaultdict(list)
        for line in self.billing_repo.get_in_window(start_date, stop_date):
            key = (line.invoice_date.year, line.invoice_date.month, str(line.charge_type))
            groups[key].append(line)

        rows = []
        for (year, month, charge_type), lines in sorted(groups.items()):
            month_start = first_day(year, month)
            calendar_row = calendar.get(month_start)
            rows.append(
                RevenueActualsRow(
                    year=year,
                    month=month,
                    month_name=(
                        calendar_row.month_name
                        if calendar_row is not None
                        else month_start.strftime("%B")
                    ),
                    month_start_date=month_start,
                    charge_type=charge_type,
                    invoice_count=len({line.invoice_number for line in lines}),
                    total_amount_billed=quantize_money(
                        sum((line.amount_billed for line in lines), ZERO)
                    ),
                    total_amount_paid=quantize_money(
                        sum((Decimal(str(line.amount_paid)) for line in lines), ZERO)
                    ),
                    total_outstanding_balance=quantize_money(
                        sum((line.balance_amount for line in lines), ZERO)
                    ),
                )
            )
        return rows

    def member_engagement(
        self,
        start: Month,
        end: Month,
        customer_id: str | None = None,
    ) -> list[MemberEngagementResponse]:
        start_date, stop_date = window_bounds(start, end)
        return [
            MemberEngagementResponse.model_validate(row)
            for row in self.engagement_repo.get_for_window(start_date, stop_date, customer_id)
        ]


def _performance_row(summary: AmenityMonthlySummary, amenity: Amenity) -> AmenityPerformanceRow:
    return AmenityPerformanceRow(
        amenity_id=UUID(str(summary.amenity_id)),
        amenity_name=str(amenity.name),
        amenity_category=str(amenity.category),
        year=summary.year,
        month=summary.month,
        month_start_date=summary.month_start_date,
        total_usage_count=summary.total_usage_count,
        unique_member_count=summary.unique_member_count,
        total_operating_cost=summary.total_operating_cost,
        operating_cost_source=summary.operating_cost_source,
        total_member_spend=summary.total_member_spend,
        member_spend_source=summary.member_spend_source,
        total_revenue=summary.total_revenue,
        operating_cost_per_use=summary.operating_cost_per_use,
        usage_status=summary.usage_status,
        watchlist=bool(summary.watchlist_flag),
    )
