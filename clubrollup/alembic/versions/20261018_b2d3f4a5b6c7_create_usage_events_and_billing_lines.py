"""create usage_events and billing_lines tables

Revision ID: b2d3f4a5b6c7
Revises: a1c2e3f4a5b6
Create Date: 2026-10-18 09:10:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "b2d3f4a5b6c7"
down_revision = "a1c2e3f4a5b6"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "usage_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("membership_enrollment_id", sa.String(length=36), nullable=False),
        sa.Column("amenity_id", sa.String(length=36), nullable=False),
        sa.Column("usage_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(
            ["membership_enrollment_id"], ["customer_memberships.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(["amenity_id"], ["amenities.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_usage_events_usage_timestamp", "usage_events", ["usage_timestamp"])
    op.create_index(
        "ix_usage_events_amenity_timestamp", "usage_events", ["amenity_id", "usage_timestamp"]
    )
    op.create_index(
        "ix_usage_events_enrollment_timestamp",
        "usage_events",
        ["membership_enrollment_id", "usage_timestamp"],
    )

    op.create_table(
        "billing_lines",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("billing_period_start", sa.Date(), nullable=True),
        sa.Column("billing_period_end", sa.Date(), nullable=True),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("membership_enrollment_id", sa.String(length=36), nullable=False),
        sa.Column("charge_type", sa.String(length=30), nullable=False),
        sa.Column("charge_sub_type", sa.String(length=50), nullable=True),
        sa.Column("amenity_id", sa.String(length=36), nullable=True),
        sa.Column(
            "quantity", sa.Numeric(precision=12, scale=2), nullable=False, server_default="1"
        ),
        sa.Column(
            "unit_price", sa.Numeric(precision=18, scale=2), nullable=False, server_default="0"
        ),
        sa.Column(
            "discount_amount",
            sa.Numeric(precision=18, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "tax_amount", sa.Numeric(precision=18, scale=2), nullable=False, server_default="0"
        ),
        sa.Column(
            "amount_paid", sa.Numeric(precision=18, scale=2), nullable=False, server_default="0"
        ),
        sa.Column("is_voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_refund", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_comped", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("source_system", sa.String(length=50), nullable=True),
        sa.Column(
            "loaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(
            ["membership_enrollment_id"], ["customer_memberships.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(["amenity_id"], ["amenities.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "invoice_number", "line_number", name="uq_billing_lines_invoice_line"
        ),
        sa.CheckConstraint(
            "charge_type IN ('DUES','INITIATION','MIN_SPEND','AMENITY','FOOD_BEV','GUEST','OTHER')",
            name="ck_billing_lines_charge_type",
        ),
        sa.CheckConstraint(
            "charge_type <> 'AMENITY' OR amenity_id IS NOT NULL",
            name="ck_billing_lines_amenity_required",
        ),
        sa.CheckConstraint(
            "quantity >= 0 AND unit_price >= 0 AND discount_amount >= 0 "
            "AND tax_amount >= 0 AND amount_paid >= 0",
            name="ck_billing_lines_amounts_non_negative",
        ),
        sa.CheckConstraint(
            "billing_period_start IS NULL OR billing_period_end IS NULL "
            "OR billing_period_start <= billing_period_end",
            name="ck_billing_lines_period_dates",
        ),
    )
    op.create_index("ix_billing_lines_invoice_date", "billing_lines", ["invoice_date"])
    op.create_index(
        "ix_billing_lines_amenity_invoice_date", "billing_lines", ["amenity_id", "invoice_date"]
    )


def downgrade():
    op.drop_index("ix_billing_lines_amenity_invoice_date", table_name="billing_lines")
    op.drop_index("ix_billing_lines_invoice_date", table_name="billing_lines")
    op.drop_table("billing_lines")
    op.drop_index("ix_usage_events_enrollment_timestamp", table_name="usage_events")
    op.drop_index("ix_usage_events_amenity_timestamp", table_name="usage_events")
    op.drop_index("ix_usage_events_usage_timestamp", table_name="usage_events")
    op.drop_table("usage_events")
