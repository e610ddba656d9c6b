"""Tests for cost, spend and revenue estimation and classification."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from clubrollup.models.monthly_summary import UsageStatus, ValueSource
from clubrollup.services.classifier import ClassifierThresholds, classify, classify_values
from clubrollup.services.cost_estimator import (
    ZERO_COST_MODEL,
    Actual,
    CostModel,
    Estimated,
    StoredActuals,
    estimate,
    quantize_money,
    revenue_by_period,
)
from clubrollup.services.usage_aggregation import PeriodAggregate

AMENITY_ID = uuid4()

POOL_MODEL = CostModel(
    monthly_fixed_cost=Decimal("200.00"),
    cost_per_use=Decimal("3.00"),
    in_dues=False,
    member_cost_per_use=Decimal("4.00"),
)


def _period(count: int, members: int | None = None) -> PeriodAggregate:
    return PeriodAggregate(
        amenity_id=AMENITY_ID,
        year=2026,
        month=3,
        total_usage_count=count,
        unique_member_count=members if members is not None else min(count, 10),
        first_use_at=None,
        last_use_at=None,
    )


class TestQuantizeMoney:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("16.333", "16.33"),
            ("0.005", "0.01"),
            ("2.675", "2.68"),
            ("10", "10.00"),
        ],
    )
    def test_rounds_half_up_to_cents(self, value, expected):
        assert quantize_money(Decimal(value)) == Decimal(expected)


class TestEstimate:
    def test_fallback_estimate_for_busy_month(self):
        result = estimate(_period(15), POOL_MODEL)
        assert result.operating_cost == Estimated(Decimal("245.00"))
        assert result.member_spend == Estimated(Decimal("60.00"))
        assert result.operating_cost_per_use == Decimal("16.33")

    def test_fallback_estimate_for_quiet_month(self):
        result = estimate(_period(5), POOL_MODEL)
        assert result.operating_cost.value == Decimal("215.00")
        assert result.operating_cost_per_use == Decimal("43.00")

    def test_zero_usage_has_no_cost_per_use(self):
        result = estimate(_period(0), POOL_MODEL)
        assert result.operating_cost == Estimated(Decimal("200.00"))
        assert result.member_spend == Estimated(Decimal("0.00"))
        assert result.operating_cost_per_use is None

    def test_in_dues_amenity_has_zero_member_spend(self):
        model = CostModel(
            monthly_fixed_cost=Decimal("50.00"),
            cost_per_use=Decimal("1.00"),
            in_dues=True,
            member_cost_per_use=Decimal("0"),
        )
        result = estimate(_period(12), model)
        assert result.member_spend == Estimated(Decimal("0.00"))

    def test_pay_per_use_member_spend(self):
        model = CostModel(
            monthly_fixed_cost=Decimal("0"),
            cost_per_use=Decimal("0"),
            in_dues=False,
            member_cost_per_use=Decimal("5.00"),
        )
        assert estimate(_period(20), model).member_spend == Estimated(Decimal("100.00"))

    def test_stored_actuals_win_field_by_field(self):
        stored = StoredActuals(operating_cost=Decimal("300"))
        result = estimate(_period(15), POOL_MODEL, stored)
        assert result.operating_cost == Actual(Decimal("300.00"))
        assert result.operating_cost.source is ValueSource.ACTUAL
        assert result.member_spend == Estimated(Decimal("60.00"))
        assert result.member_spend.source is ValueSource.ESTIMATED
        assert result.operating_cost_per_use == Decimal("20.00")

    def test_actual_member_spend(self):
        stored = StoredActuals(member_spend=Decimal("72.50"))
        result = estimate(_period(15), POOL_MODEL, stored)
        assert result.member_spend == Actual(Decimal("72.50"))
        assert result.operating_cost == Estimated(Decimal("245.00"))

    def test_zero_cost_model(self):
        result = estimate(_period(7), ZERO_COST_MODEL)
        assert result.operating_cost == Estimated(Decimal("0.00"))
        assert result.member_spend == Estimated(Decimal("0.00"))
        assert result.operating_cost_per_use == Decimal("0.00")

    def test_is_deterministic(self):
        assert estimate(_period(15), POOL_MODEL) == estimate(_period(15), POOL_MODEL)


class TestStoredActuals:
    def test_none_without_summary(self):
        assert StoredActuals.from_summary(None) is None

    def test_none_when_everything_is_estimated(self):
        summary = SimpleNamespace(
            operating_cost_source="estimated",
            total_operating_cost=Decimal("245.00"),
            member_spend_source="estimated",
            total_member_spend=Decimal("60.00"),
        )
        assert StoredActuals.from_summary(summary) is None

    def test_reads_actual_fields_only(self):
        summary = SimpleNamespace(
            operating_cost_source="actual",
            total_operating_cost=Decimal("310.00"),
            member_spend_source="estimated",
            total_member_spend=Decimal("60.00"),
        )
        assert StoredActuals.from_summary(summary) == StoredActuals(
            operating_cost=Decimal("310.00")
        )


class TestRevenueByPeriod:
    def _line(self, **overrides):
        values = {
            "charge_type": "AMENITY",
            "amenity_id": AMENITY_ID,
            "invoice_date": date(2026, 3, 10),
            "is_voided": False,
            "amount_billed": Decimal("25.00"),
        }
        values.update(overrides)
        return SimpleNamespace(**values)

    def test_sums_amenity_lines_per_month(self):
        lines = [
            self._line(),
            self._line(amount_billed=Decimal("12.50")),
            self._line(invoice_date=date(2026, 4, 1)),
        ]
        revenue = revenue_by_period(lines)
        assert revenue[(AMENITY_ID, 2026, 3)] == Decimal("37.50")
        assert revenue[(AMENITY_ID, 2026, 4)] == Decimal("25.00")

    def test_ignores_voided_and_other_charge_types(self):
        lines = [
            self._line(is_voided=True),
            self._line(charge_type="DUES", amenity_id=None),
            self._line(charge_type="FOOD_BEV"),
        ]
        assert revenue_by_period(lines) == {}


class TestClassifier:
    def test_busy_month_is_in_use(self):
        period = _period(15)
        labels = classify(period, estimate(period, POOL_MODEL), ClassifierThresholds())
        assert labels.usage_status is UsageStatus.IN_USE
        assert labels.watchlist is False

    def test_quiet_costly_month_is_watchlisted(self):
        period = _period(5)
        labels = classify(period, estimate(period, POOL_MODEL), ClassifierThresholds())
        assert labels.usage_status is UsageStatus.UNDERUTILIZED
        assert labels.watchlist is True

    def test_unused_month_is_underutilized(self):
        labels = classify_values(0, Decimal("0.00"), ClassifierThresholds())
        assert labels.usage_status is UsageStatus.UNDERUTILIZED
        assert labels.watchlist is False

    @pytest.mark.parametrize(
        ("count", "cost", "status", "watchlist"),
        [
            (10, Decimal("100.00"), UsageStatus.UNDERUTILIZED, True),
            (11, Decimal("100.00"), UsageStatus.IN_USE, False),
            (10, Decimal("99.99"), UsageStatus.UNDERUTILIZED, False),
        ],
    )
    def test_threshold_boundaries(self, count, cost, status, watchlist):
        labels = classify_values(count, cost, ClassifierThresholds())
        assert labels.usage_status is status
        assert labels.watchlist is watchlist

    def test_custom_thresholds(self):
        thresholds = ClassifierThresholds(
            underuse_usage_ceiling=20, underuse_cost_floor=Decimal("500")
        )
        labels = classify_values(15, Decimal("245.00"), thresholds)
        assert labels.usage_status is UsageStatus.UNDERUTILIZED
        assert labels.watchlist is False

    def test_thresholds_from_settings(self):
        thresholds = ClassifierThresholds.from_settings()
        assert thresholds.underuse_usage_ceiling == 10
        assert thresholds.underuse_cost_floor == Decimal("100.00")
