"""Shared test fixtures for all test modules."""

import contextlib
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import clubrollup.models  # noqa: F401
from clubrollup.core import database as db_module
from clubrollup.core.database import Base
from clubrollup.core.period_locks import period_locks
from clubrollup.models.amenity import Amenity
from clubrollup.models.customer_membership import CustomerMembership
from clubrollup.models.monthly_summary import AmenityMonthlySummary
from clubrollup.repositories.amenity_repository import AmenityCostRepository, AmenityRepository
from clubrollup.repositories.calendar_date_repository import CalendarDateRepository
from clubrollup.repositories.membership_repository import (
    CustomerMembershipRepository,
    MembershipRepository,
)
from clubrollup.repositories.usage_event_repository import UsageEventRepository
from clubrollup.schemas.amenity import AmenityCostCreate, AmenityCreate
from clubrollup.schemas.membership import CustomerMembershipCreate, MembershipCreate
from clubrollup.schemas.usage_event import UsageEventCreate
from clubrollup.services.period_dates import month_bounds

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    period_locks.reset()
    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct testing."""
    gen = db_module.get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


def create_amenity(
    db: Session,
    name: str,
    category: str = "Recreation",
    monthly_fixed_cost: str | None = "200.00",
    cost_per_use: str = "3.00",
    in_dues: bool = True,
    member_cost_per_use: str = "0",
    active: bool = True,
) -> Amenity:
    """Create an amenity, with a cost model unless ``monthly_fixed_cost`` is None."""
    amenity = AmenityRepository(db).create(
        AmenityCreate(name=name, category=category, active_flag=active)
    )
    if monthly_fixed_cost is not None:
        AmenityCostRepository(db).upsert(
            UUID(str(amenity.id)),
            AmenityCostCreate(
                monthly_fixed_cost=Decimal(monthly_fixed_cost),
                cost_per_use=Decimal(cost_per_use),
                in_dues_flag=in_dues,
                member_cost_per_use=Decimal(member_cost_per_use),
            ),
        )
    return amenity


def create_enrollments(db: Session, count: int, prefix: str = "cust") -> list[CustomerMembership]:
    membership = MembershipRepository(db).create(
        MembershipCreate(description=f"{prefix} tier", category="Full")
    )
    repo = CustomerMembershipRepository(db)
    return [
        repo.create(
            CustomerMembershipCreate(
                customer_id=f"{prefix}-{i:03d}",
                membership_id=membership.id,
                join_date=date(2025, 1, 1),
                renewal_date=date(2027, 1, 1),
            )
        )
        for i in range(count)
    ]


def seed_calendar(db: Session, year: int, month: int) -> int:
    start, stop = month_bounds(year, month)
    return CalendarDateRepository(db).populate(start, stop)


def record_usage(
    db: Session,
    amenity: Amenity,
    enrollments: list[CustomerMembership],
    count: int,
    year: int,
    month: int,
    first_day: int = 1,
) -> None:
    """Record ``count`` uses of ``amenity``, cycling through ``enrollments``."""
    UsageEventRepository(db).create_batch(
        [
            UsageEventCreate(
                membership_enrollment_id=enrollments[i % len(enrollments)].id,
                amenity_id=amenity.id,
                usage_timestamp=datetime(year, month, first_day + i % 20, 8 + i % 10, 15),
            )
            for i in range(count)
        ]
    )


def count_summaries(db: Session, amenity_id, year: int, month: int) -> int:
    return (
        db.query(AmenityMonthlySummary)
        .filter(
            AmenityMonthlySummary.amenity_id == amenity_id,
            AmenityMonthlySummary.year == year,
            AmenityMonthlySummary.month == month,
        )
        .count()
    )
