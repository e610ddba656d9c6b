"""Recomputation of amenity monthly summaries and member engagement rows.

A run reads every event and reference row of its window up front, computes
each period from scratch, validates the candidate rows and only then writes
them, one period key at a time under that key's lock. Stored actual figures
are read again under the lock, so actuals recorded mid-run are written back.
"""

import logging
from collections.abc import Callable, Hashable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clubrollup.core.config import settings
from clubrollup.core.errors import (
    GrainViolation,
    IntegrityViolation,
    InvalidRecomputeWindow,
    ReferenceNotFound,
    ReferenceStoreUnavailable,
    RollupError,
)
from clubrollup.core.period_locks import PeriodLockRegistry, period_locks
from clubrollup.models.billing_line import ChargeType
from clubrollup.models.monthly_summary import AmenityMonthlySummary
from clubrollup.models.recompute_run import RecomputeRunStatus
from clubrollup.models.shared import utc_now
from clubrollup.repositories.amenity_repository import AmenityCostRepository, AmenityRepository
from clubrollup.repositories.billing_line_repository import BillingLineRepository
from clubrollup.repositories.calendar_date_repository import CalendarDateRepository
from clubrollup.repositories.member_engagement_repository import MemberEngagementRepository
from clubrollup.repositories.membership_repository import CustomerMembershipRepository
from clubrollup.repositories.monthly_summary_repository import MonthlySummaryRepository
from clubrollup.repositories.recompute_run_repository import RecomputeRunRepository
from clubrollup.repositories.usage_event_repository import UsageEventRepository
from clubrollup.schemas.member_engagement import MemberEngagementCreate
from clubrollup.schemas.monthly_summary import MonthlySummaryCreate, SummaryActualsUpdate
from clubrollup.schemas.recompute import (
    EntityType,
    PeriodRef,
    PeriodSkip,
    RecomputeReport,
    RecomputeRequest,
    RowRejection,
)
from clubrollup.services.classifier import ClassifierThresholds, Labels, classify
from clubrollup.services.cost_estimator import (
    ZERO_COST_MODEL,
    CostEstimate,
    CostModel,
    StoredActuals,
    estimate,
    revenue_by_period,
)
from clubrollup.services.grain_validator import GrainValidator
from clubrollup.services.period_dates import first_day, iter_months, window_bounds
from clubrollup.services.usage_aggregation import (
    AggregationResult,
    EngagementAggregate,
    EnrollmentRef,
    PeriodAggregate,
    ReferenceWindow,
    UsageEventRecord,
    aggregate,
    aggregate_engagement,
)

logger = logging.getLogger(__name__)

PeriodKey = tuple[UUID, int, int]

SKIP_CANCELLED = "cancelled"
SKIP_STORE_UNAVAILABLE = "store_unavailable"
SKIP_MISSING_COST_MODEL = "missing_cost_model"


def build_summary_row(
    aggregate_: PeriodAggregate,
    estimate_: CostEstimate,
    labels: Labels,
    revenue: Decimal | None,
) -> MonthlySummaryCreate:
    return MonthlySummaryCreate(
        amenity_id=aggregate_.amenity_id,
        year=aggregate_.year,
        month=aggregate_.month,
        month_start_date=aggregate_.month_start_date,
        total_usage_count=aggregate_.total_usage_count,
        unique_member_count=aggregate_.unique_member_count,
        first_use_at=aggregate_.first_use_at,
        last_use_at=aggregate_.last_use_at,
        total_operating_cost=estimate_.operating_cost.value,
        operating_cost_source=estimate_.operating_cost.source,
        total_member_spend=estimate_.member_spend.value,
        member_spend_source=estimate_.member_spend.source,
        total_revenue=revenue,
        operating_cost_per_use=estimate_.operating_cost_per_use,
        usage_status=labels.usage_status,
        watchlist_flag=labels.watchlist,
    )


def build_engagement_row(aggregate_: EngagementAggregate) -> MemberEngagementCreate:
    year, month = aggregate_.year, aggregate_.month
    return MemberEngagementCreate(
        membership_enrollment_id=aggregate_.membership_enrollment_id,
        customer_id=aggregate_.customer_id,
        membership_id=aggregate_.membership_id,
        employee_flag=aggregate_.employee_flag,
        year=year,
        month=month,
        month_start_date=first_day(year, month),
        usage_count=aggregate_.usage_count,
        distinct_amenities_used=aggregate_.distinct_amenities_used,
        first_use_at=aggregate_.first_use_at,
        last_use_at=aggregate_.last_use_at,
    )


@dataclass
class _WindowSnapshot:
    """Everything a run reads before it computes anything."""

    months: list[tuple[int, int]]
    aggregation: AggregationResult
    cost_models: dict[UUID, CostModel]
    stored_actuals: dict[PeriodKey, StoredActuals | None]
    revenue: dict[PeriodKey, Decimal]
    idle_keys: set[PeriodKey] = field(default_factory=set)
    engagement: AggregationResult | None = None
    stored_engagement: dict[PeriodKey, EnrollmentRef] = field(default_factory=dict)
    _by_key: dict[PeriodKey, PeriodAggregate] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_key = {a.period_key: a for a in self.aggregation.aggregates}

    def period(self, key: PeriodKey) -> PeriodAggregate | None:
        return self._by_key.get(key)

    def summary_keys(self) -> list[PeriodKey]:
        keys = {a.period_key for a in self.aggregation.aggregates}
        keys.update(self.stored_actuals)
        keys.update(self.idle_keys)
        return sorted(keys, key=lambda k: (k[1], k[2], str(k[0])))

    def engagement_aggregates(self) -> list[EngagementAggregate]:
        if self.engagement is None:
            return []
        aggregates = {a.period_key: a for a in self.engagement.aggregates}
        for key, enrollment in self.stored_engagement.items():
            if key not in aggregates:
                enrollment_id, year, month = key
                aggregates[key] = EngagementAggregate(
                    membership_enrollment_id=enrollment_id,
                    customer_id=enrollment.customer_id,
                    membership_id=enrollment.membership_id,
                    year=year,
                    month=month,
                    usage_count=0,
                    distinct_amenities_used=0,
                    first_use_at=None,
                    last_use_at=None,
                    employee_flag=enrollment.employee_flag,
                )
        return sorted(
            aggregates.values(),
            key=lambda a: (a.year, a.month, str(a.membership_enrollment_id)),
        )


@dataclass
class _PendingWrite:
    entity_type: EntityType
    row: Any
    write: Callable[[Any], Any]
    check_reference: Callable[[Any], None]
    refresh: Callable[[Any], Any] | None = None

    @property
    def lock_key(self) -> Hashable:
        return (self.entity_type, *self.row.period_key)

    def ref(self) -> PeriodRef:
        return PeriodRef(
            entity_type=self.entity_type,
            entity_id=str(self.row.entity_id),
            year=self.row.year,
            month=self.row.month,
        )


class MonthlySummaryService:
    """Recomputes the summary store for a window of calendar months."""

    def __init__(
        self,
        db: Session,
        thresholds: ClassifierThresholds | None = None,
        locks: PeriodLockRegistry = period_locks,
    ):
        self.db = db
        self.thresholds = thresholds or ClassifierThresholds.from_settings()
        self.locks = locks
        self.validator = GrainValidator()
        self.timezone = ZoneInfo(settings.CLUB_TIMEZONE)
        self.missing_cost_model_policy = settings.MISSING_COST_MODEL_POLICY
        self.max_workers = max(1, settings.RECOMPUTE_MAX_WORKERS)
        self.retry_attempts = max(0, settings.UPSERT_RETRY_ATTEMPTS)

        self.amenity_repo = AmenityRepository(db)
        self.cost_repo = AmenityCostRepository(db)
        self.enrollment_repo = CustomerMembershipRepository(db)
        self.event_repo = UsageEventRepository(db)
        self.billing_repo = BillingLineRepository(db)
        self.calendar_repo = CalendarDateRepository(db)
        self.summary_repo = MonthlySummaryRepository(db)
        self.engagement_repo = MemberEngagementRepository(db)
        self.run_repo = RecomputeRunRepository(db)

    def recompute(
        self,
        request: RecomputeRequest,
        should_cancel: Callable[[], bool] | None = None,
    ) -> RecomputeReport:
        """Recompute every period of the request's window.

        Per-row failures are reported and never stop the run. A failed read
        aborts the run before anything is written; a lost store during writes
        stops it and reports the remaining periods as skipped.

        Raises:
            InvalidRecomputeWindow: the window starts after it ends.
        """
        start = (request.start_year, request.start_month)
        end = (request.end_year, request.end_month)
        if start > end:
            raise InvalidRecomputeWindow(f"window start {start} is after window end {end}")

        started_at = utc_now()
        window_start, window_stop = window_bounds(start, end)
        report = RecomputeReport(
            status=RecomputeRunStatus.COMPLETED.value,
            window_start=window_start,
            window_end=window_stop - timedelta(days=1),
        )
        months = list(iter_months(start, end))
        amenity_ids = request.amenity_ids
        with_engagement = request.include_engagement and amenity_ids is None

        logger.info(
            "Recomputing %d month(s) from %s to %s (amenities: %s)",
            len(months),
            report.window_start,
            report.window_end,
            "all" if amenity_ids is None else len(amenity_ids),
        )

        try:
            snapshot = self._load_snapshot(
                months,
                amenity_ids,
                include_idle=request.include_idle_amenities,
                include_engagement=with_engagement,
            )
        except ReferenceStoreUnavailable as exc:
            logger.error("Recompute aborted: %s", exc)
            entity_ids = ["*"] if amenity_ids is None else [str(a) for a in amenity_ids]
            report.skipped = [
                PeriodSkip(
                    entity_type="amenity",
                    entity_id=entity_id,
                    year=year,
                    month=month,
                    reason=SKIP_STORE_UNAVAILABLE,
                )
                for year, month in months
                for entity_id in entity_ids
            ]
            report.status = RecomputeRunStatus.ABORTED.value
            report.error_code = exc.code
            report.error_message = str(exc)
            return self._finish(report, started_at)

        report.warnings.extend(snapshot.aggregation.warnings)
        if snapshot.engagement is not None:
            report.warnings.extend(snapshot.engagement.warnings)

        pending = self._plan_summary_writes(snapshot, report)
        pending.extend(self._plan_engagement_writes(snapshot, report))
        self._apply_writes(pending, report, should_cancel)
        return self._finish(report, started_at)

    def record_actuals(
        self,
        amenity_id: UUID,
        year: int,
        month: int,
        update: SummaryActualsUpdate,
    ) -> AmenityMonthlySummary:
        """Store actual cost figures for one amenity-month and re-derive its summary.

        Fields left unset keep their current value and provenance. The period
        is recomputed from its events, so a month without a summary row yet
        gets one.

        Raises:
            ReferenceNotFound: the amenity does not exist.
            GrainViolation: (year, month) is not a calendar month.
            IntegrityViolation: the store refused the write after retrying.
            ReferenceStoreUnavailable: reference data could not be read.
        """
        key = (amenity_id, year, month)
        if not 1 <= month <= 12:
            raise GrainViolation(key, f"month {month} outside 1..12")
        if not self.amenity_repo.exists(amenity_id):
            raise ReferenceNotFound("amenity", amenity_id)

        snapshot = self._load_snapshot([(year, month)], [amenity_id])

        try:
            with self.locks.hold(("amenity", *key)):
                attempt = 0
                while True:
                    row = self._current_summary(key, snapshot, update)
                    try:
                        summary = self.summary_repo.upsert(row)
                        break
                    except IntegrityViolation:
                        if attempt >= self.retry_attempts:
                            raise
                        attempt += 1
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ReferenceStoreUnavailable(str(exc)) from exc

        logger.info(
            "Recorded actuals for amenity %s %04d-%02d (operating cost: %s, member spend: %s)",
            amenity_id,
            year,
            month,
            summary.operating_cost_source,
            summary.member_spend_source,
        )
        return summary

    def _load_snapshot(
        self,
        months: list[tuple[int, int]],
        amenity_ids: list[UUID] | None,
        include_idle: bool = False,
        include_engagement: bool = False,
    ) -> _WindowSnapshot:
        """Read everything the window needs.

        Raises:
            ReferenceStoreUnavailable: any read failed.
        """
        window_start, window_stop = window_bounds(months[0], months[-1])

        try:
            amenities = self.amenity_repo.get_all()
            known_amenities = frozenset(UUID(str(a.id)) for a in amenities)

            records = [
                UsageEventRecord.from_model(event)
                for event, _ in self.event_repo.get_in_club_window(
                    window_start, window_stop, self.timezone, amenity_ids=amenity_ids
                )
            ]
            stored_rows = (
                self.engagement_repo.get_for_window(window_start, window_stop)
                if include_engagement
                else []
            )

            enrollment_ids = {r.membership_enrollment_id for r in records}
            enrollment_ids.update(UUID(str(row.membership_enrollment_id)) for row in stored_rows)
            enrollments = {
                enrollment_id: EnrollmentRef(
                    customer_id=str(e.customer_id),
                    membership_id=UUID(str(e.membership_id)),
                    employee_flag=bool(e.employee_flag),
                )
                for enrollment_id, e in self.enrollment_repo.get_by_ids(enrollment_ids).items()
            }
            reference_window = ReferenceWindow(
                calendar_dates=frozenset(self.calendar_repo.get_range(window_start, window_stop)),
                amenity_ids=known_amenities,
                enrollments=enrollments,
                timezone=self.timezone,
            )

            cost_models = {
                amenity_id: CostModel.from_model(cost)
                for amenity_id, cost in self.cost_repo.get_for_amenities(known_amenities).items()
            }
            stored_actuals = {
                (UUID(str(s.amenity_id)), int(s.year), int(s.month)): StoredActuals.from_summary(s)
                for s in self.summary_repo.get_for_window(window_start, window_stop, amenity_ids)
            }
            revenue = revenue_by_period(
                self.billing_repo.get_in_window(
                    window_start,
                    window_stop,
                    charge_type=ChargeType.AMENITY,
                    amenity_ids=amenity_ids,
                )
            )

            idle_keys: set[PeriodKey] = set()
            if include_idle:
                for amenity in self.amenity_repo.get_all(active_only=True, amenity_ids=amenity_ids):
                    idle_keys.update((UUID(str(amenity.id)), y, m) for y, m in months)

            stored_engagement: dict[PeriodKey, EnrollmentRef] = {}
            for row in stored_rows:
                enrollment_id = UUID(str(row.membership_enrollment_id))
                stored_engagement[(enrollment_id, int(row.year), int(row.month))] = (
                    enrollments.get(enrollment_id)
                    or EnrollmentRef(
                        customer_id=str(row.customer_id),
                        membership_id=UUID(str(row.membership_id)),
                        employee_flag=bool(row.employee_flag),
                    )
                )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ReferenceStoreUnavailable(str(exc)) from exc

        return _WindowSnapshot(
            months=months,
            aggregation=aggregate(records, reference_window),
            cost_models=cost_models,
            stored_actuals=stored_actuals,
            revenue=revenue,
            idle_keys=idle_keys,
            engagement=(
                aggregate_engagement(records, reference_window) if include_engagement else None
            ),
            stored_engagement=stored_engagement,
        )

    def _build_summary(
        self,
        key: PeriodKey,
        snapshot: _WindowSnapshot,
        policy: str | None = None,
    ) -> MonthlySummaryCreate | PeriodSkip:
        amenity_id, year, month = key
        period = snapshot.period(key) or PeriodAggregate.empty(amenity_id, year, month)

        cost_model = snapshot.cost_models.get(amenity_id)
        if cost_model is None:
            if (policy or self.missing_cost_model_policy) == "skip":
                return PeriodSkip(
                    entity_type="amenity",
                    entity_id=str(amenity_id),
                    year=year,
                    month=month,
                    reason=SKIP_MISSING_COST_MODEL,
                )
            cost_model = ZERO_COST_MODEL

        estimate_ = estimate(period, cost_model, snapshot.stored_actuals.get(key))
        labels = classify(period, estimate_, self.thresholds)
        return build_summary_row(period, estimate_, labels, snapshot.revenue.get(key))

    def _current_summary(
        self,
        key: PeriodKey,
        snapshot: _WindowSnapshot,
        update: SummaryActualsUpdate | None = None,
    ) -> MonthlySummaryCreate:
        """Rebuild one summary from the actuals stored right now.

        The stored row stays locked until the session's next commit or
        rollback. ``update`` overlays new actual figures on the stored ones.

        Raises:
            GrainViolation: the rebuilt row breaks the grain rules.
        """
        amenity_id, year, month = key
        actuals = StoredActuals.from_summary(
            self.summary_repo.get_by_key_for_update(amenity_id, year, month)
        )
        if update is not None:
            current = actuals or StoredActuals()
            actuals = StoredActuals(
                operating_cost=(
                    update.operating_cost
                    if update.operating_cost is not None
                    else current.operating_cost
                ),
                member_spend=(
                    update.member_spend
                    if update.member_spend is not None
                    else current.member_spend
                ),
            )
        snapshot.stored_actuals[key] = actuals

        row = self._build_summary(key, snapshot, policy="zero_cost")
        try:
            if isinstance(row, PeriodSkip):
                raise ReferenceNotFound("amenity cost model", amenity_id)
            self.validator.check_row(row)
        except RollupError:
            self.db.rollback()
            raise
        return row

    def _plan_summary_writes(
        self, snapshot: _WindowSnapshot, report: RecomputeReport
    ) -> list[_PendingWrite]:
        keys = snapshot.summary_keys()
        if self.max_workers > 1 and len(keys) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                built = list(pool.map(lambda k: self._build_summary(k, snapshot), keys))
        else:
            built = [self._build_summary(k, snapshot) for k in keys]

        candidates: list[MonthlySummaryCreate] = []
        for item in built:
            if isinstance(item, PeriodSkip):
                logger.info(
                    "Skipping amenity %s %04d-%02d: %s",
                    item.entity_id,
                    item.year,
                    item.month,
                    item.reason,
                )
                report.skipped.append(item)
            else:
                candidates.append(item)

        return self._validated_writes(
            "amenity",
            candidates,
            report,
            write=self.summary_repo.upsert,
            check_reference=self._check_amenity,
            refresh=lambda row: self._current_summary(row.period_key, snapshot),
        )

    def _plan_engagement_writes(
        self, snapshot: _WindowSnapshot, report: RecomputeReport
    ) -> list[_PendingWrite]:
        candidates = [build_engagement_row(a) for a in snapshot.engagement_aggregates()]
        return self._validated_writes(
            "member",
            candidates,
            report,
            write=self.engagement_repo.upsert,
            check_reference=self._check_enrollment,
        )

    def _validated_writes(
        self,
        entity_type: EntityType,
        candidates: list[Any],
        report: RecomputeReport,
        write: Callable[[Any], Any],
        check_reference: Callable[[Any], None],
        refresh: Callable[[Any], Any] | None = None,
    ) -> list[_PendingWrite]:
        result = self.validator.validate(candidates)
        for violation in result.rejected:
            entity_id, year, month = violation.period_key
            report.rejected.append(
                RowRejection(
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    year=year,
                    month=month,
                    code=violation.code,
                    detail=violation.reason,
                )
            )
        return [
            _PendingWrite(
                entity_type, row, write=write, check_reference=check_reference, refresh=refresh
            )
            for row in result.accepted
        ]

    def _check_amenity(self, row: MonthlySummaryCreate) -> None:
        if not self.amenity_repo.exists(row.amenity_id):
            raise ReferenceNotFound("amenity", row.amenity_id)

    def _check_enrollment(self, row: MemberEngagementCreate) -> None:
        if not self.enrollment_repo.exists(row.membership_enrollment_id):
            raise ReferenceNotFound("membership enrollment", row.membership_enrollment_id)

    def _apply_writes(
        self,
        pending: list[_PendingWrite],
        report: RecomputeReport,
        should_cancel: Callable[[], bool] | None,
    ) -> None:
        for index, item in enumerate(pending):
            if should_cancel is not None and should_cancel():
                logger.warning("Recompute cancelled with %d period(s) left", len(pending) - index)
                report.status = RecomputeRunStatus.CANCELLED.value
                report.skipped.extend(_skips(pending[index:], SKIP_CANCELLED))
                return

            try:
                with self.locks.hold(item.lock_key):
                    rejection = self._write_one(item)
            except SQLAlchemyError as exc:
                self.db.rollback()
                unavailable = ReferenceStoreUnavailable(str(exc))
                logger.error("Recompute stopped at %s: %s", item.lock_key, unavailable)
                report.status = RecomputeRunStatus.ABORTED.value
                report.error_code = unavailable.code
                report.error_message = str(unavailable)
                report.skipped.extend(_skips(pending[index:], SKIP_STORE_UNAVAILABLE))
                return

            if rejection is None:
                report.committed.append(item.ref())
            else:
                report.rejected.append(rejection)

    def _write_one(self, item: _PendingWrite) -> RowRejection | None:
        """Reference-check, refresh and upsert one row, retrying integrity failures."""
        attempt = 0
        while True:
            try:
                item.check_reference(item.row)
                if item.refresh is not None:
                    item.row = item.refresh(item.row)
                item.write(item.row)
                return None
            except IntegrityViolation as violation:
                if attempt >= self.retry_attempts:
                    return _rejection(item, violation, violation.detail)
                attempt += 1
                logger.info("Retrying upsert of %s after integrity failure", item.lock_key)
                try:
                    self.validator.check_row(item.row)
                except GrainViolation as grain_violation:
                    return _rejection(item, grain_violation, grain_violation.reason)
            except GrainViolation as grain_violation:
                logger.warning("Rejected %s: %s", item.lock_key, grain_violation)
                return _rejection(item, grain_violation, grain_violation.reason)
            except ReferenceNotFound as not_found:
                logger.warning("Rejected %s: %s", item.lock_key, not_found)
                return _rejection(item, not_found, str(not_found))

    def _finish(self, report: RecomputeReport, started_at: datetime) -> RecomputeReport:
        try:
            run = self.run_repo.record(report, started_at)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to record recompute run")
        else:
            report.run_id = UUID(str(run.id))

        logger.info(
            "Recompute %s: %d committed, %d skipped, %d rejected, %d warning(s)",
            report.status,
            report.periods_committed,
            report.periods_skipped,
            report.rows_rejected,
            len(report.warnings),
        )
        return report


def _skips(items: Iterable[_PendingWrite], reason: str) -> list[PeriodSkip]:
    return [PeriodSkip(**item.ref().model_dump(), reason=reason) for item in items]


def _rejection(item: _PendingWrite, error: RollupError, detail: str) -> RowRejection:
    return RowRejection(**item.ref().model_dump(), code=error.code, detail=detail)
