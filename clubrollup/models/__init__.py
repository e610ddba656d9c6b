from clubrollup.models.amenity import Amenity
from clubrollup.models.amenity_cost import AmenityCost
from clubrollup.models.billing_line import BillingLine, ChargeType
from clubrollup.models.calendar_date import CalendarDate
from clubrollup.models.customer_membership import CustomerMembership
from clubrollup.models.member_engagement import MemberMonthlyEngagement
from clubrollup.models.membership import Membership
from clubrollup.models.membership_amenity import MembershipAmenity
from clubrollup.models.monthly_summary import AmenityMonthlySummary, UsageStatus, ValueSource
from clubrollup.models.recompute_run import RecomputeRun, RecomputeRunStatus
from clubrollup.models.usage_event import UsageEvent

__all__ = [
    "Amenity",
    "AmenityCost",
    "AmenityMonthlySummary",
    "BillingLine",
    "CalendarDate",
    "ChargeType",
    "CustomerMembership",
    "MemberMonthlyEngagement",
    "Membership",
    "MembershipAmenity",
    "RecomputeRun",
    "RecomputeRunStatus",
    "UsageEvent",
    "UsageStatus",
    "ValueSource",
]
