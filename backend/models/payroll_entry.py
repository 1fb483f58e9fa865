"""
Payroll Entry Model

Persisted results of a payroll settlement run, one row per shift.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class PayrollEntryRecord(TimestampMixin, Base):
    """
    Settled pay for one completed shift.

    shift_id is unique: re-running settlement replaces the row instead of
    paying a shift twice.
    """

    __tablename__ = "payroll_entries"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    shift_id: Mapped[UUID] = mapped_column(
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    worker_id: Mapped[str] = mapped_column(String(100), nullable=False)
    worker_name: Mapped[str] = mapped_column(String(255), nullable=False)
    shift_date: Mapped[date] = mapped_column(nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    overtime_minutes: Mapped[int] = mapped_column(default=0, nullable=False)
    shift_category: Mapped[str] = mapped_column(String(20), nullable=False)

    pay_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    base_pay: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_pay: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    rate_source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="snapshot|live",
    )

    adjusted: Mapped[bool] = mapped_column(default=False, nullable=False)
    adjustment_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_payroll_entries_worker", "worker_id"),
        Index("ix_payroll_entries_date", "shift_date"),
    )

    def __repr__(self) -> str:
        return f"<PayrollEntryRecord(shift={self.shift_id}, total={self.total_pay})>"
