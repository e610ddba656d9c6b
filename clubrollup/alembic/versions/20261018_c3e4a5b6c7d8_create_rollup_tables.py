"""create amenity_monthly_summaries, member_monthly_engagements and recompute_runs tables

Revision ID: c3e4a5b6c7d8
Revises: b2d3f4a5b6c7
Create Date: 2026-10-18 09:20:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c3e4a5b6c7d8"
down_revision = "b2d3f4a5b6c7"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "amenity_monthly_summaries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("amenity_id", sa.String(length=36), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("month_start_date", sa.Date(), nullable=False),
        sa.Column("total_usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unique_member_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_use_at", sa.DateTime(), nullable=True),
        sa.Column("last_use_at", sa.DateTime(), nullable=True),
        sa.Column(
            "total_operating_cost",
            sa.Numeric(precision=18, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "operating_cost_source",
            sa.String(length=20),
            nullable=False,
            server_default="estimated",
        ),
        sa.Column("total_member_spend", sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column(
            "member_spend_source",
            sa.String(length=20),
            nullable=False,
            server_default="estimated",
        ),
        sa.Column("total_revenue", sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column("operating_cost_per_use", sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column(
            "usage_status", sa.String(length=20), nullable=False, server_default="Underutilized"
        ),
        sa.Column("watchlist_flag", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["amenity_id"], ["amenities.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "amenity_id",
            "year",
            "month",
            name="uq_amenity_monthly_summary_amenity_year_month",
        ),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_amenity_monthly_summary_month"),
        sa.CheckConstraint(
            "total_usage_count >= 0 AND unique_member_count >= 0",
            name="ck_amenity_monthly_summary_counts_non_negative",
        ),
        sa.CheckConstraint(
            "total_operating_cost >= 0",
            name="ck_amenity_monthly_summary_cost_non_negative",
        ),
        sa.CheckConstraint(
            "total_member_spend IS NULL OR total_member_spend >= 0",
            name="ck_amenity_monthly_summary_spend_non_negative",
        ),
    )
    op.create_index(
        "ix_amenity_monthly_summaries_amenity_id", "amenity_monthly_summaries", ["amenity_id"]
    )

    op.create_table(
        "member_monthly_engagements",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("membership_enrollment_id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("membership_id", sa.String(length=36), nullable=False),
        sa.Column("employee_flag", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("month_start_date", sa.Date(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("distinct_amenities_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_use_at", sa.DateTime(), nullable=True),
        sa.Column("last_use_at", sa.DateTime(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(
            ["membership_enrollment_id"], ["customer_memberships.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "membership_enrollment_id",
            "year",
            "month",
            name="uq_member_monthly_engagement_enrollment_year_month",
        ),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_member_monthly_engagement_month"),
        sa.CheckConstraint(
            "usage_count >= 0 AND distinct_amenities_used >= 0",
            name="ck_member_monthly_engagement_counts_non_negative",
        ),
    )
    op.create_index(
        "ix_member_monthly_engagements_membership_enrollment_id",
        "member_monthly_engagements",
        ["membership_enrollment_id"],
    )

    op.create_table(
        "recompute_runs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("window_start", sa.Date(), nullable=False),
        sa.Column("window_end", sa.Date(), nullable=False),
        sa.Column("periods_committed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("periods_skipped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rows_rejected", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("warnings_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_code", sa.String(length=50), nullable=True),
        sa.Column("error_message", sa.String(length=4000), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade():
    op.drop_table("recompute_runs")
    op.drop_index(
        "ix_member_monthly_engagements_membership_enrollment_id",
        table_name="member_monthly_engagements",
    )
    op.drop_table("member_monthly_engagements")
    op.drop_index(
        "ix_amenity_monthly_summaries_amenity_id", table_name="amenity_monthly_summaries"
    )
    op.drop_table("amenity_monthly_summaries")
