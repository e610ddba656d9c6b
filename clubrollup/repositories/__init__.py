from clubrollup.repositories.amenity_repository import AmenityCostRepository, AmenityRepository
from clubrollup.repositories.billing_line_repository import BillingLineRepository
from clubrollup.repositories.calendar_date_repository import CalendarDateRepository
from clubrollup.repositories.member_engagement_repository import MemberEngagementRepository
from clubrollup.repositories.membership_repository import (
    CustomerMembershipRepository,
    MembershipRepository,
)
from clubrollup.repositories.monthly_summary_repository import MonthlySummaryRepository
from clubrollup.repositories.recompute_run_repository import RecomputeRunRepository
from clubrollup.repositories.usage_event_repository import UsageEventRepository

__all__ = [
    "AmenityCostRepository",
    "AmenityRepository",
    "BillingLineRepository",
    "CalendarDateRepository",
    "CustomerMembershipRepository",
    "MemberEngagementRepository",
    "MembershipRepository",
    "MonthlySummaryRepository",
    "RecomputeRunRepository",
    "UsageEventRepository",
]
