"""Operating cost, member spend and revenue estimation for one amenity-month.

Each money field is resolved on its own: a stored actual wins, otherwise the
value is derived from the amenity's cost model. Results are tagged with their
provenance so downstream readers can tell the two apart.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union
from uuid import UUID

from clubrollup.models.amenity_cost import AmenityCost
from clubrollup.models.billing_line import BillingLine, ChargeType
from clubrollup.models.monthly_summary import AmenityMonthlySummary, ValueSource
from clubrollup.services.usage_aggregation import PeriodAggregate

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Actual:
    value: Decimal

    source = ValueSource.ACTUAL


@dataclass(frozen=True)
class Estimated:
    value: Decimal

    source = ValueSource.ESTIMATED


MoneyValue = Union[Actual, Estimated]


@dataclass(frozen=True)
class CostModel:
    """Immutable snapshot of an amenity's cost and pricing configuration."""

    monthly_fixed_cost: Decimal
    cost_per_use: Decimal
    in_dues: bool
    member_cost_per_use: Decimal
    initial_build_cost: Decimal = ZERO
    useful_life_years: int | None = None

    @classmethod
    def from_model(cls, cost: AmenityCost) -> "CostModel":
        return cls(
            monthly_fixed_cost=Decimal(str(cost.monthly_fixed_cost)),
            cost_per_use=Decimal(str(cost.cost_per_use)),
            in_dues=bool(cost.in_dues_flag),
            member_cost_per_use=Decimal(str(cost.member_cost_per_use)),
            initial_build_cost=Decimal(str(cost.initial_build_cost)),
            useful_life_years=cost.useful_life_years,  # type: ignore[arg-type]
        )


# Used for amenities that have no cost model configured
ZERO_COST_MODEL = CostModel(
    monthly_fixed_cost=ZERO,
    cost_per_use=ZERO,
    in_dues=True,
    member_cost_per_use=ZERO,
)


@dataclass(frozen=True)
class StoredActuals:
    """Actual figures previously recorded for a period, if any."""

    operating_cost: Decimal | None = None
    member_spend: Decimal | None = None

    @classmethod
    def from_summary(cls, summary: AmenityMonthlySummary | None) -> "StoredActuals | None":
        if summary is None:
            return None
        operating_cost = None
        member_spend = None
        if summary.operating_cost_source == ValueSource.ACTUAL.value:
            operating_cost = Decimal(str(summary.total_operating_cost))
        if (
            summary.member_spend_source == ValueSource.ACTUAL.value
            and summary.total_member_spend is not None
        ):
            member_spend = Decimal(str(summary.total_member_spend))
        if operating_cost is None and member_spend is None:
            return None
        return cls(operating_cost=operating_cost, member_spend=member_spend)


@dataclass(frozen=True)
class CostEstimate:
    operating_cost: MoneyValue
    member_spend: MoneyValue
    operating_cost_per_use: Decimal | None


def cost_per_use(operating_cost: Decimal, usage_count: int) -> Decimal | None:
    """Operating cost divided by uses; undefined (None) when nothing was used."""
    if usage_count <= 0:
        return None
    return quantize_money(operating_cost / Decimal(usage_count))


def estimate(
    aggregate: PeriodAggregate,
    cost_model: CostModel,
    stored_actual: StoredActuals | None = None,
) -> CostEstimate:
    count = Decimal(aggregate.total_usage_count)

    operating_cost: MoneyValue
    if stored_actual is not None and stored_actual.operating_cost is not None:
        operating_cost = Actual(quantize_money(stored_actual.operating_cost))
    else:
        operating_cost = Estimated(
            quantize_money(cost_model.monthly_fixed_cost + cost_model.cost_per_use * count)
        )

    member_spend: MoneyValue
    if stored_actual is not None and stored_actual.member_spend is not None:
        member_spend = Actual(quantize_money(stored_actual.member_spend))
    elif cost_model.in_dues:
        member_spend = Estimated(ZERO)
    else:
        member_spend = Estimated(quantize_money(cost_model.member_cost_per_use * count))

    return CostEstimate(
        operating_cost=operating_cost,
        member_spend=member_spend,
        operating_cost_per_use=cost_per_use(operating_cost.value, aggregate.total_usage_count),
    )


def revenue_by_period(
    billing_lines: Iterable[BillingLine],
) -> dict[tuple[UUID, int, int], Decimal]:
    """Billed amenity revenue keyed by (amenity, invoice year, invoice month).

    Voided lines and lines of other charge types are ignored. Periods without
    a qualifying line are absent from the result.
    """
    totals: dict[tuple[UUID, int, int], Decimal] = defaultdict(lambda: ZERO)
    for line in billing_lines:
        if line.is_voided or line.charge_type != ChargeType.AMENITY.value:
            continue
        if line.amenity_id is None:
            continue
        key = (UUID(str(line.amenity_id)), line.invoice_date.year, line.invoice_date.month)
        totals[key] += line.amount_billed
    return {key: quantize_money(total) for key, total in totals.items()}
