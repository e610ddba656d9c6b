from clubrollup.schemas.amenity import AmenityCostCreate, AmenityCreate
from clubrollup.schemas.billing_line import BillingLineCreate
from clubrollup.schemas.member_engagement import MemberEngagementCreate, MemberEngagementResponse
from clubrollup.schemas.membership import (
    CustomerMembershipCreate,
    MembershipAmenityCreate,
    MembershipCreate,
)
from clubrollup.schemas.monthly_summary import (
    MonthlySummaryCreate,
    MonthlySummaryResponse,
    SummaryActualsUpdate,
)
from clubrollup.schemas.recompute import (
    DataQualityWarning,
    PeriodRef,
    PeriodSkip,
    RecomputeReport,
    RecomputeRequest,
    RecomputeRunResponse,
    RowRejection,
)
from clubrollup.schemas.reporting import (
    AmenityPerformanceRow,
    AmenityProfitabilityRow,
    DailyUsageRow,
    PeakTimeRow,
    RevenueActualsRow,
)
from clubrollup.schemas.usage_event import UsageEventCreate

__all__ = [
    "AmenityCostCreate",
    "AmenityCreate",
    "AmenityPerformanceRow",
    "AmenityProfitabilityRow",
    "BillingLineCreate",
    "CustomerMembershipCreate",
    "DailyUsageRow",
    "DataQualityWarning",
    "MemberEngagementCreate",
    "MemberEngagementResponse",
    "MembershipAmenityCreate",
    "MembershipCreate",
    "MonthlySummaryCreate",
    "MonthlySummaryResponse",
    "PeakTimeRow",
    "PeriodRef",
    "PeriodSkip",
    "RecomputeReport",
    "RecomputeRequest",
    "RecomputeRunResponse",
    "RevenueActualsRow",
    "RowRejection",
    "SummaryActualsUpdate",
    "UsageEventCreate",
]
