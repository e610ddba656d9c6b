from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from clubrollup.models.customer_membership import CustomerMembership
from clubrollup.models.membership import Membership
from clubrollup.models.membership_amenity import MembershipAmenity
from clubrollup.schemas.membership import (
    CustomerMembershipCreate,
    MembershipAmenityCreate,
    MembershipCreate,
)


class MembershipRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, membership_id: UUID) -> Membership | None:
        return self.db.query(Membership).filter(Membership.id == membership_id).first()

    def create(self, data: MembershipCreate) -> Membership:
        membership = Membership(**data.model_dump())
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def add_amenity(self, data: MembershipAmenityCreate) -> MembershipAmenity:
        """Entitle a membership tier to an amenity (replaces an existing entitlement)."""
        link = (
            self.db.query(MembershipAmenity)
            .filter(
                MembershipAmenity.membership_id == data.membership_id,
                MembershipAmenity.amenity_id == data.amenity_id,
            )
            .first()
        )
        if link is None:
            link = MembershipAmenity(
                membership_id=data.membership_id,
                amenity_id=data.amenity_id,
            )
            self.db.add(link)
        link.included_flag = data.included_flag  # type: ignore[assignment]
        link.guest_allowance_count = data.guest_allowance_count  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(link)
        return link

    def get_amenities(self, membership_id: UUID) -> list[MembershipAmenity]:
        return (
            self.db.query(MembershipAmenity)
            .filter(MembershipAmenity.membership_id == membership_id)
            .all()
        )


class CustomerMembershipRepository:
    """Member enrollments referenced by usage events and billing lines."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, enrollment_id: UUID) -> CustomerMembership | None:
        return (
            self.db.query(CustomerMembership)
            .filter(CustomerMembership.id == enrollment_id)
            .first()
        )

    def get_by_ids(self, enrollment_ids: Iterable[UUID]) -> dict[UUID, CustomerMembership]:
        ids = list(enrollment_ids)
        if not ids:
            return {}
        rows = self.db.query(CustomerMembership).filter(CustomerMembership.id.in_(ids)).all()
        return {UUID(str(row.id)): row for row in rows}

    def exists(self, enrollment_id: UUID) -> bool:
        return self.get_by_id(enrollment_id) is not None

    def create(self, data: CustomerMembershipCreate) -> CustomerMembership:
        enrollment = CustomerMembership(**data.model_dump())
        self.db.add(enrollment)
        self.db.commit()
        self.db.refresh(enrollment)
        return enrollment
