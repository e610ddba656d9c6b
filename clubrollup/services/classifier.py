"""Usage status and watchlist labelling of amenity-months."""

from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, Field

from clubrollup.core.config import settings
from clubrollup.models.monthly_summary import UsageStatus
from clubrollup.services.cost_estimator import CostEstimate
from clubrollup.services.usage_aggregation import PeriodAggregate


class ClassifierThresholds(BaseModel):
    underuse_usage_ceiling: int = Field(default=10, ge=0)
    underuse_cost_floor: Decimal = Field(default=Decimal("100.00"), ge=0)

    @classmethod
    def from_settings(cls) -> "ClassifierThresholds":
        return cls(
            underuse_usage_ceiling=settings.UNDERUSE_USAGE_CEILING,
            underuse_cost_floor=settings.UNDERUSE_COST_FLOOR,
        )


@dataclass(frozen=True)
class Labels:
    usage_status: UsageStatus
    watchlist: bool


def classify_values(
    usage_count: int,
    operating_cost: Decimal,
    thresholds: ClassifierThresholds,
) -> Labels:
    """Label a period from its usage count and operating cost.

    A month with usage at or below the ceiling (zero included) is
    underutilized; it is also watchlisted when it cost at least the floor.
    """
    underused = usage_count <= thresholds.underuse_usage_ceiling
    return Labels(
        usage_status=UsageStatus.UNDERUTILIZED if underused else UsageStatus.IN_USE,
        watchlist=underused and operating_cost >= thresholds.underuse_cost_floor,
    )


def classify(
    aggregate: PeriodAggregate,
    estimate: CostEstimate,
    thresholds: ClassifierThresholds,
) -> Labels:
    return classify_values(
        aggregate.total_usage_count,
        estimate.operating_cost.value,
        thresholds,
    )
