from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)

from clubrollup.core.database import Base
from clubrollup.models.shared import UUIDType, generate_uuid

_CENTS = Decimal("0.01")


class ChargeType(str, Enum):
    DUES = "DUES"
    INITIATION = "INITIATION"
    MIN_SPEND = "MIN_SPEND"
    AMENITY = "AMENITY"
    FOOD_BEV = "FOOD_BEV"
    GUEST = "GUEST"
    OTHER = "OTHER"


class BillingLine(Base):
    """One invoice line loaded from the club's billing system."""

    __tablename__ = "billing_lines"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), nullable=False)
    line_number = Column(Integer, nullable=False)
    invoice_date = Column(Date, nullable=False)
    billing_period_start = Column(Date, nullable=True)
    billing_period_end = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True)
    membership_enrollment_id = Column(
        UUIDType,
        ForeignKey("customer_memberships.id", ondelete="RESTRICT"),
        nullable=False,
    )
    charge_type = Column(String(30), nullable=False)
    charge_sub_type = Column(String(50), nullable=True)
    amenity_id = Column(
        UUIDType,
        ForeignKey("amenities.id", ondelete="RESTRICT"),
        nullable=True,
    )
    quantity = Column(Numeric(12, 2), nullable=False, default=1)
    unit_price = Column(Numeric(18, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(18, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(18, 2), nullable=False, default=0)
    is_voided = Column(Boolean, nullable=False, default=False)
    is_refund = Column(Boolean, nullable=False, default=False)
    is_comped = Column(Boolean, nullable=False, default=False)
    source_system = Column(String(50), nullable=True)
    loaded_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("invoice_number", "line_number", name="uq_billing_lines_invoice_line"),
        CheckConstraint(
            "charge_type IN ('DUES','INITIATION','MIN_SPEND','AMENITY','FOOD_BEV','GUEST','OTHER')",
            name="ck_billing_lines_charge_type",
        ),
        CheckConstraint(
            "charge_type <> 'AMENITY' OR amenity_id IS NOT NULL",
            name="ck_billing_lines_amenity_required",
        ),
        CheckConstraint(
            "quantity >= 0 AND unit_price >= 0 AND discount_amount >= 0 "
            "AND tax_amount >= 0 AND amount_paid >= 0",
            name="ck_billing_lines_amounts_non_negative",
        ),
        CheckConstraint(
            "billing_period_start IS NULL OR billing_period_end IS NULL "
            "OR billing_period_start <= billing_period_end",
            name="ck_billing_lines_period_dates",
        ),
        Index("ix_billing_lines_invoice_date", "invoice_date"),
        Index("ix_billing_lines_amenity_invoice_date", "amenity_id", "invoice_date"),
    )

    @property
    def amount_billed(self) -> Decimal:
        gross = Decimal(str(self.quantity)) * Decimal(str(self.unit_price))
        billed = gross - Decimal(str(self.discount_amount)) + Decimal(str(self.tax_amount))
        return billed.quantize(_CENTS, rounding=ROUND_HALF_UP)

    @property
    def balance_amount(self) -> Decimal:
        balance = self.amount_billed - Decimal(str(self.amount_paid))
        return balance.quantize(_CENTS, rounding=ROUND_HALF_UP)
