"""
Shift Model

The operational job record a worker claims, checks into and signs out of.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, JSONType, TimestampMixin
from engines.schemas.shift import ShiftStatus

if TYPE_CHECKING:
    from backend.models.booking import BookingRecord


class ShiftRecord(TimestampMixin, Base):
    """
    One shift per booking.

    status only moves forward (available -> claimed -> checked-in -> completed)
    and every move is a conditional UPDATE on the current status.
    """

    __tablename__ = "shifts"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    booking_id: Mapped[UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    worker_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    worker_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    services: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Display names of the booked services",
    )
    category: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="standard|hospital|doctor, copied from the booking at creation",
    )

    scheduled_date: Mapped[date] = mapped_column(nullable=False)
    scheduled_start: Mapped[time] = mapped_column(nullable=False)
    scheduled_end: Mapped[time] = mapped_column(nullable=False)

    claimed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    checked_in_at: Mapped[datetime | None] = mapped_column(nullable=True)
    check_in_location: Mapped[dict | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="{'lat': float, 'lng': float}",
    )
    signed_out_at: Mapped[datetime | None] = mapped_column(nullable=True)

    overtime_minutes: Mapped[int] = mapped_column(default=0, nullable=False)
    flagged_for_overtime: Mapped[bool] = mapped_column(default=False, nullable=False)
    care_record: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    pay_rate_snapshot: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Worker hourly rate for the category at sign-out",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=ShiftStatus.AVAILABLE.value,
        nullable=False,
        comment="available|claimed|checked-in|completed",
    )

    # Relationships
    booking: Mapped["BookingRecord"] = relationship(
        "BookingRecord",
        back_populates="shift",
    )

    __table_args__ = (
        Index("ix_shifts_status", "status"),
        Index("ix_shifts_worker", "worker_id"),
        Index("ix_shifts_date", "scheduled_date"),
    )

    def __repr__(self) -> str:
        return f"<ShiftRecord(id={self.id}, status={self.status}, worker={self.worker_id})>"
