"""Initial schema: bookings, shifts, payroll entries, configuration

Revision ID: p001
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "p001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # === bookings ===
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.String(100), nullable=False, comment="Identity-provider user id of the ordering client"),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(255), nullable=False),
        sa.Column("client_phone", sa.String(50), nullable=True),
        sa.Column("patient_name", sa.String(255), nullable=True),
        sa.Column("service_address", sa.Text(), nullable=False),
        sa.Column("postal_code", sa.String(10), nullable=True),
        sa.Column("special_instructions", sa.Text(), nullable=True),
        sa.Column("task_ids", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_start", sa.Time(), nullable=False),
        sa.Column("scheduled_end", sa.Time(), nullable=False),
        sa.Column("is_asap", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("surge_multiplier", sa.Numeric(6, 3), nullable=False),
        sa.Column("base_minutes", sa.Integer(), nullable=False),
        sa.Column("base_cost", sa.Numeric(10, 2), nullable=False),
        sa.Column("base_charge", sa.Numeric(10, 2), nullable=False),
        sa.Column("hst_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("surge_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_minimum_fee_applied", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("overtime_charge", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="invoice-pending"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("archived_from_status", sa.String(20), nullable=True),
        sa.Column("refund_eligible", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("category IN ('standard', 'hospital', 'doctor')", name="valid_booking_category"),
        sa.CheckConstraint(
            "payment_status IN ('invoice-pending', 'paid', 'refunded')",
            name="valid_payment_status",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'in-progress', 'completed', 'cancelled', 'archived')",
            name="valid_booking_status",
        ),
    )
    op.create_index("ix_bookings_client", "bookings", ["client_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_date", "bookings", ["scheduled_date"])

    # === shifts ===
    op.create_table(
        "shifts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("booking_id", sa.Uuid(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("worker_id", sa.String(100), nullable=True),
        sa.Column("worker_name", sa.String(255), nullable=True),
        sa.Column("services", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("category", sa.String(20), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_start", sa.Time(), nullable=False),
        sa.Column("scheduled_end", sa.Time(), nullable=False),
        sa.Column("claimed_at", sa.DateTime(), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(), nullable=True),
        sa.Column("check_in_location", postgresql.JSONB(), nullable=True),
        sa.Column("signed_out_at", sa.DateTime(), nullable=True),
        sa.Column("overtime_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("flagged_for_overtime", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("care_record", postgresql.JSONB(), nullable=True),
        sa.Column("pay_rate_snapshot", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('available', 'claimed', 'checked-in', 'completed')",
            name="valid_shift_status",
        ),
        sa.CheckConstraint("overtime_minutes >= 0", name="non_negative_overtime"),
        sa.CheckConstraint("checked_in_at IS NULL OR claimed_at IS NOT NULL", name="check_in_requires_claim"),
        sa.CheckConstraint("signed_out_at IS NULL OR checked_in_at IS NOT NULL", name="sign_out_requires_check_in"),
    )
    op.create_index("ix_shifts_status", "shifts", ["status"])
    op.create_index("ix_shifts_worker", "shifts", ["worker_id"])
    op.create_index("ix_shifts_date", "shifts", ["scheduled_date"])

    # === payroll_entries ===
    op.create_table(
        "payroll_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("shift_id", sa.Uuid(), sa.ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("worker_id", sa.String(100), nullable=False),
        sa.Column("worker_name", sa.String(255), nullable=False),
        sa.Column("shift_date", sa.Date(), nullable=False),
        sa.Column("hours_worked", sa.Numeric(8, 2), nullable=False),
        sa.Column("overtime_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("shift_category", sa.String(20), nullable=False),
        sa.Column("pay_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("base_pay", sa.Numeric(10, 2), nullable=False),
        sa.Column("overtime_pay", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_pay", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_source", sa.String(20), nullable=False, comment="snapshot|live"),
        sa.Column("adjusted", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("adjustment_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payroll_entries_worker", "payroll_entries", ["worker_id"])
    op.create_index("ix_payroll_entries_date", "payroll_entries", ["shift_date"])

    # === settings_documents ===
    op.create_table(
        "settings_documents",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("updated_by", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("key"),
    )

    # === service_tasks ===
    op.create_table(
        "service_tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("task_key", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("included_minutes", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("category IN ('standard', 'hospital', 'doctor')", name="valid_task_category"),
        sa.CheckConstraint("included_minutes >= 0", name="non_negative_minutes"),
    )


def downgrade() -> None:
    op.drop_table("service_tasks")
    op.drop_table("settings_documents")
    op.drop_index("ix_payroll_entries_date", table_name="payroll_entries")
    op.drop_index("ix_payroll_entries_worker", table_name="payroll_entries")
    op.drop_table("payroll_entries")
    op.drop_index("ix_shifts_date", table_name="shifts")
    op.drop_index("ix_shifts_worker", table_name="shifts")
    op.drop_index("ix_shifts_status", table_name="shifts")
    op.drop_table("shifts")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_client", table_name="bookings")
    op.drop_table("bookings")
