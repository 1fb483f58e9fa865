"""
Booking Model

The ordering record: who asked for care, where, when, and the quote the
client agreed to pay.
"""

from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, JSONType, TimestampMixin

if TYPE_CHECKING:
    from backend.models.shift import ShiftRecord


class BookingStatus(str, Enum):
    """Booking status; follows the shift once a worker is involved."""

    PENDING = "pending"
    ACTIVE = "active"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class PaymentStatus(str, Enum):
    """Client payment status."""

    INVOICE_PENDING = "invoice-pending"
    PAID = "paid"
    REFUNDED = "refunded"


class BookingRecord(TimestampMixin, Base):
    """
    Client booking with its embedded quote.

    The quote columns are written once at creation. Overtime billed after
    sign-out lands in overtime_charge; the quote itself is never rewritten.
    """

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )

    # Client identity
    client_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Identity-provider user id of the ordering client",
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False)
    client_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    patient_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Care recipient when different from the client",
    )
    service_address: Mapped[str] = mapped_column(Text, nullable=False)
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # What and when
    task_ids: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Selected service task ids",
    )
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Highest-priority task category: standard|hospital|doctor",
    )
    scheduled_date: Mapped[date] = mapped_column(nullable=False)
    scheduled_start: Mapped[time] = mapped_column(nullable=False)
    scheduled_end: Mapped[time] = mapped_column(nullable=False)
    is_asap: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Quote
    surge_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    base_minutes: Mapped[int] = mapped_column(nullable=False)
    base_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    base_charge: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    hst_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    surge_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_minimum_fee_applied: Mapped[bool] = mapped_column(default=False, nullable=False)

    overtime_charge: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0.00"),
        nullable=False,
        comment="Client overtime billed at sign-out",
    )

    payment_status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.INVOICE_PENDING.value,
        nullable=False,
        comment="invoice-pending|paid|refunded",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=BookingStatus.PENDING.value,
        nullable=False,
        comment="pending|active|in-progress|completed|cancelled|archived",
    )
    archived_from_status: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Status to return to on restore",
    )
    refund_eligible: Mapped[bool | None] = mapped_column(
        nullable=True,
        comment="Set on cancellation",
    )

    # Relationships
    shift: Mapped["ShiftRecord"] = relationship(
        "ShiftRecord",
        back_populates="booking",
        uselist=False,
    )

    __table_args__ = (
        Index("ix_bookings_client", "client_id"),
        Index("ix_bookings_status", "status"),
        Index("ix_bookings_date", "scheduled_date"),
    )

    def __repr__(self) -> str:
        return f"<BookingRecord(id={self.id}, status={self.status}, total={self.total})>"
