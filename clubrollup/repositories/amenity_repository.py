from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from clubrollup.models.amenity import Amenity
from clubrollup.models.amenity_cost import AmenityCost
from clubrollup.schemas.amenity import AmenityCostCreate, AmenityCreate


class AmenityRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        active_only: bool = False,
        amenity_ids: Iterable[UUID] | None = None,
    ) -> list[Amenity]:
        query = self.db.query(Amenity)
        if active_only:
            query = query.filter(Amenity.active_flag.is_(True))
        if amenity_ids is not None:
            query = query.filter(Amenity.id.in_(list(amenity_ids)))
        return query.order_by(Amenity.name).all()

    def get_by_id(self, amenity_id: UUID) -> Amenity | None:
        return self.db.query(Amenity).filter(Amenity.id == amenity_id).first()

    def exists(self, amenity_id: UUID) -> bool:
        return self.get_by_id(amenity_id) is not None

    def create(self, data: AmenityCreate) -> Amenity:
        amenity = Amenity(
            name=data.name,
            category=data.category,
            active_flag=data.active_flag,
        )
        self.db.add(amenity)
        self.db.commit()
        self.db.refresh(amenity)
        return amenity


class AmenityCostRepository:
    """Per-amenity cost models, keyed by amenity id."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_amenity_id(self, amenity_id: UUID) -> AmenityCost | None:
        return self.db.query(AmenityCost).filter(AmenityCost.amenity_id == amenity_id).first()

    def get_for_amenities(self, amenity_ids: Iterable[UUID]) -> dict[UUID, AmenityCost]:
        ids = list(amenity_ids)
        if not ids:
            return {}
        rows = self.db.query(AmenityCost).filter(AmenityCost.amenity_id.in_(ids)).all()
        return {UUID(str(row.amenity_id)): row for row in rows}

    def upsert(self, amenity_id: UUID, data: AmenityCostCreate) -> AmenityCost:
        """Create or replace the cost model of an amenity."""
        cost = self.get_by_amenity_id(amenity_id)
        if cost is None:
            cost = AmenityCost(amenity_id=amenity_id)
            self.db.add(cost)
        for key, value in data.model_dump().items():
            setattr(cost, key, value)
        self.db.commit()
        self.db.refresh(cost)
        return cost
