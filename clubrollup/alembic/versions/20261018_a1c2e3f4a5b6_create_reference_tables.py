"""create amenity, membership and calendar reference tables

Revision ID: a1c2e3f4a5b6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a1c2e3f4a5b6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "amenities",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("active_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "amenity_costs",
        sa.Column("amenity_id", sa.String(length=36), nullable=False),
        sa.Column(
            "initial_build_cost",
            sa.Numeric(precision=18, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "monthly_fixed_cost",
            sa.Numeric(precision=18, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "cost_per_use", sa.Numeric(precision=18, scale=2), nullable=False, server_default="0"
        ),
        sa.Column("useful_life_years", sa.Integer(), nullable=True),
        sa.Column("active_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("in_dues_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "member_cost_per_use",
            sa.Numeric(precision=18, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["amenity_id"], ["amenities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("amenity_id"),
        sa.CheckConstraint(
            "initial_build_cost >= 0 AND monthly_fixed_cost >= 0 AND cost_per_use >= 0",
            name="ck_amenity_costs_non_negative",
        ),
        sa.CheckConstraint(
            "member_cost_per_use >= 0",
            name="ck_amenity_costs_member_cost_non_negative",
        ),
        sa.CheckConstraint(
            "(in_dues_flag AND member_cost_per_use = 0) "
            "OR (NOT in_dues_flag AND member_cost_per_use > 0)",
            name="ck_amenity_costs_in_dues_member_cost",
        ),
    )

    op.create_table(
        "memberships",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("monthly_dues_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("monthly_minimum_spend", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("initiation_fee", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("age_min", sa.Integer(), nullable=True),
        sa.Column("age_max", sa.Integer(), nullable=True),
        sa.Column(
            "requires_sponsor_flag", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("active_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "membership_amenities",
        sa.Column("membership_id", sa.String(length=36), nullable=False),
        sa.Column("amenity_id", sa.String(length=36), nullable=False),
        sa.Column("included_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("guest_allowance_count", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["membership_id"], ["memberships.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["amenity_id"], ["amenities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("membership_id", "amenity_id"),
    )

    op.create_table(
        "customer_memberships",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("membership_id", sa.String(length=36), nullable=False),
        sa.Column("join_date", sa.Date(), nullable=False),
        sa.Column("renewal_date", sa.Date(), nullable=False),
        sa.Column("active_flag", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("employee_flag", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["membership_id"], ["memberships.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_id"),
    )
    op.create_index(
        "ix_customer_memberships_membership_id", "customer_memberships", ["membership_id"]
    )

    op.create_table(
        "calendar_dates",
        sa.Column("calendar_date", sa.Date(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("month_name", sa.String(length=20), nullable=False),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.Column("day_of_year", sa.Integer(), nullable=False),
        sa.Column("iso_day_of_week", sa.Integer(), nullable=False),
        sa.Column("day_name", sa.String(length=20), nullable=False),
        sa.Column("iso_week_of_year", sa.Integer(), nullable=False),
        sa.Column("is_weekend", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_holiday", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("holiday_name", sa.String(length=100), nullable=True),
        sa.Column("is_business_day", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("calendar_date"),
    )


def downgrade():
    op.drop_table("calendar_dates")
    op.drop_index("ix_customer_memberships_membership_id", table_name="customer_memberships")
    op.drop_table("customer_memberships")
    op.drop_table("membership_amenities")
    op.drop_table("memberships")
    op.drop_table("amenity_costs")
    op.drop_table("amenities")
