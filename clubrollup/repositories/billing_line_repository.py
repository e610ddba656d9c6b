from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from clubrollup.models.billing_line import BillingLine, ChargeType
from clubrollup.schemas.billing_line import BillingLineCreate


class BillingLineRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_invoice_line(self, invoice_number: str, line_number: int) -> BillingLine | None:
        return (
            self.db.query(BillingLine)
            .filter(
                BillingLine.invoice_number == invoice_number,
                BillingLine.line_number == line_number,
            )
            .first()
        )

    def get_in_window(
        self,
        start_date: date,
        end_date: date,
        charge_type: ChargeType | None = None,
        amenity_ids: Iterable[UUID] | None = None,
        include_voided: bool = False,
    ) -> list[BillingLine]:
        """Billing lines invoiced within ``start_date <= invoice_date < end_date``."""
        query = self.db.query(BillingLine).filter(
            BillingLine.invoice_date >= start_date,
            BillingLine.invoice_date < end_date,
        )
        if not include_voided:
            query = query.filter(BillingLine.is_voided.is_(False))
        if charge_type is not None:
            query = query.filter(BillingLine.charge_type == charge_type.value)
        if amenity_ids is not None:
            query = query.filter(BillingLine.amenity_id.in_(list(amenity_ids)))
        return query.order_by(BillingLine.invoice_date, BillingLine.invoice_number).all()

    def create_or_get_existing(self, data: BillingLineCreate) -> tuple[BillingLine, bool]:
        """Create a billing line or return the one already loaded for the invoice line.

        Returns:
            Tuple of (line, is_new).
        """
        existing = self.get_by_invoice_line(data.invoice_number, data.line_number)
        if existing:
            return existing, False
        payload = data.model_dump()
        payload["charge_type"] = data.charge_type.value
        line = BillingLine(**payload)
        self.db.add(line)
        self.db.commit()
        self.db.refresh(line)
        return line, True
