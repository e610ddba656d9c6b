from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, func

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid


class CustomerMembership(Base):
    """A member's enrollment in a membership tier.

    Usage events and billing lines reference the enrollment, not the customer.
    """

    __tablename__ = "customer_memberships"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    customer_id = Column(String(255), unique=True, nullable=False)
    membership_id = Column(
        UUIDType,
        ForeignKey("memberships.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    join_date = Column(Date, nullable=False)
    renewal_date = Column(Date, nullable=False)
    active_flag = Column(Boolean, nullable=False, default=True)
    employee_flag = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
