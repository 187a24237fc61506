"""Create shareholders, closings, readings, expenses and audit tables.

Revision ID: 001_create_closing_core
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_closing_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


expense_type_enum = sa.Enum("operational", "advance", name="expense_type")
audit_action_enum = sa.Enum(
    "create", "update", "soft-delete", "close-month", name="audit_action"
)


def upgrade() -> None:
    op.create_table(
        "monthly_closings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("location_id", sa.String(length=64), nullable=False),
        sa.Column("period_year", sa.Integer(), nullable=False),
        sa.Column("period_month", sa.Integer(), nullable=False),
        sa.Column("total_net_profit", sa.Numeric(14, 2), nullable=False),
        sa.Column("retained_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("distributed_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("closed_by", sa.String(length=128), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "period_month >= 1 AND period_month <= 12",
            name="ck_monthly_closings_month_range",
        ),
        sa.CheckConstraint(
            "retained_amount >= 0",
            name="ck_monthly_closings_retained_non_negative",
        ),
        sa.CheckConstraint(
            "retained_amount = 0 OR retained_amount <= total_net_profit",
            name="ck_monthly_closings_retained_within_profit",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "location_id",
            "period_year",
            "period_month",
            name="uq_monthly_closings_location_period",
        ),
    )

    op.create_table(
        "shareholders",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("location_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column(
            "participates_in_loss",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "accumulated_balance",
            sa.Numeric(14, 2),
            nullable=False,
            server_default="0",
        ),
        sa.Column(
            "balance_version", sa.Integer(), nullable=False, server_default="1"
        ),
        sa.Column("last_closing_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "percentage >= 0 AND percentage <= 100",
            name="ck_shareholders_percentage_range",
        ),
        sa.ForeignKeyConstraint(["last_closing_id"], ["monthly_closings.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_shareholders_location_id", "shareholders", ["location_id"])

    op.create_table(
        "settlement_details",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("closing_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("shareholder_id", sa.String(length=64), nullable=False),
        sa.Column("shareholder_name", sa.String(length=120), nullable=False),
        sa.Column("period_share", sa.Numeric(14, 2), nullable=False),
        sa.Column("prior_balance_carried", sa.Numeric(14, 2), nullable=False),
        sa.Column("advances_deducted", sa.Numeric(14, 2), nullable=False),
        sa.Column("final_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("new_accumulated_balance", sa.Numeric(14, 2), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["closing_id"], ["monthly_closings.id"]),
        sa.ForeignKeyConstraint(["shareholder_id"], ["shareholders.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "closing_id",
            "shareholder_id",
            name="uq_settlement_details_closing_shareholder",
        ),
    )

    op.create_table(
        "readings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("location_id", sa.String(length=64), nullable=False),
        sa.Column("route_id", sa.String(length=64), nullable=False),
        sa.Column("point_id", sa.String(length=64), nullable=False),
        sa.Column("operator_id", sa.String(length=64), nullable=False),
        sa.Column("reading_date", sa.Date(), nullable=False),
        sa.Column("previous_entries", sa.Numeric(14, 2), nullable=False),
        sa.Column("current_entries", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_entries", sa.Numeric(14, 2), nullable=False),
        sa.Column("previous_exits", sa.Numeric(14, 2), nullable=False),
        sa.Column("current_exits", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_exits", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_general", sa.Numeric(14, 2), nullable=False),
        sa.Column("commission_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("expense", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_final", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.String(length=280), nullable=True),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_readings_location_date", "readings", ["location_id", "reading_date"]
    )
    op.create_index(
        "ix_readings_operator_date", "readings", ["operator_id", "reading_date"]
    )

    op.create_table(
        "expenses",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("location_id", sa.String(length=64), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.String(length=280), nullable=False),
        sa.Column("expense_type", expense_type_enum, nullable=False),
        sa.Column("shareholder_id", sa.String(length=64), nullable=True),
        sa.Column("cost_center_id", sa.String(length=64), nullable=True),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint(
            """
            (expense_type = 'operational' AND shareholder_id IS NULL)
            OR
            (expense_type = 'advance' AND shareholder_id IS NOT NULL)
            """,
            name="ck_expenses_advance_requires_shareholder",
        ),
        sa.ForeignKeyConstraint(["shareholder_id"], ["shareholders.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_expenses_location_date", "expenses", ["location_id", "expense_date"]
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("action", audit_action_enum, nullable=False),
        sa.Column("collection", sa.String(length=64), nullable=False),
        sa.Column("document_id", sa.String(length=64), nullable=False),
        sa.Column("details", sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_audit_logs_document", "audit_logs", ["collection", "document_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_audit_logs_document", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_expenses_location_date", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_readings_operator_date", table_name="readings")
    op.drop_index("ix_readings_location_date", table_name="readings")
    op.drop_table("readings")
    op.drop_table("settlement_details")
    op.drop_index("ix_shareholders_location_id", table_name="shareholders")
    op.drop_table("shareholders")
    op.drop_table("monthly_closings")
    audit_action_enum.drop(op.get_bind(), checkfirst=True)
    expense_type_enum.drop(op.get_bind(), checkfirst=True)
