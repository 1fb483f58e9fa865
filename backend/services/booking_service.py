"""
Booking Service

Creates priced bookings (and their shift), and applies the admin and
client actions on them: cancel, archive, restore.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.booking import BookingRecord, BookingStatus, PaymentStatus
from backend.services.config_store import ConfigStore
from backend.services.notifications import Notification, NotificationEvent, Notifier, notify
from backend.services.shift_lifecycle import ShiftLifecycleManager
from engines.schemas.pricing import Quote
from engines.services.pricing_calculator import price
from engines.services.surge_evaluator import evaluate_surge

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.ACTIVE.value)


class BookingError(Exception):
    """Base class for rejected booking actions."""


class BookingNotFound(LookupError):
    def __init__(self, booking_id: UUID):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class OutsideServiceArea(BookingError):
    pass


class NoServicesSelected(BookingError):
    pass


class InvalidBookingState(BookingError):
    pass


class BookingRequest(BaseModel):
    """Validated booking input from the booking flow."""

    client_id: str
    client_name: str
    client_email: str
    client_phone: str | None = None
    patient_name: str | None = None
    service_address: str
    postal_code: str | None = None
    special_instructions: str | None = None
    within_coverage: bool = True
    task_ids: list[str]
    scheduled_date: date
    scheduled_start: time
    scheduled_end: time
    is_asap: bool = False
    explicit_duration_hours: Decimal | None = None


class CancellationResult(BaseModel):
    booking_id: UUID
    refund_eligible: bool
    payment_status: PaymentStatus
    hours_until_start: float


def check_cancellation_refund(
    scheduled_date: date,
    scheduled_start: time,
    is_asap: bool,
    now: datetime,
    refund_window_hours: int = 4,
) -> tuple[bool, float]:
    """
    Refund eligibility for a cancellation at ``now``.

    ASAP bookings are never refundable; otherwise the client must cancel at
    least ``refund_window_hours`` before the scheduled start.
    """
    start_at = datetime.combine(scheduled_date, scheduled_start)
    hours_until_start = (start_at - now) / timedelta(hours=1)
    if is_asap:
        return False, hours_until_start
    return hours_until_start >= refund_window_hours, hours_until_start


class BookingService:
    """Booking creation and admin actions."""

    def __init__(self, db: AsyncSession, lifecycle: ShiftLifecycleManager, notifier: Notifier | None = None):
        self.db = db
        self.lifecycle = lifecycle
        self.notifier = notifier
        self.config_store = ConfigStore(db)

    async def get(self, booking_id: UUID) -> BookingRecord:
        booking = await self.db.get(BookingRecord, booking_id, populate_existing=True)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    async def list_bookings(
        self,
        client_id: str | None = None,
        status: BookingStatus | None = None,
        include_archived: bool = False,
    ) -> list[BookingRecord]:
        stmt = select(BookingRecord).order_by(
            BookingRecord.scheduled_date.desc(), BookingRecord.scheduled_start.desc()
        )
        if client_id is not None:
            stmt = stmt.where(BookingRecord.client_id == client_id)
        if status is not None:
            stmt = stmt.where(BookingRecord.status == status.value)
        elif not include_archived:
            stmt = stmt.where(BookingRecord.status != BookingStatus.ARCHIVED.value)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def quote(
        self,
        task_ids: list[str],
        booking_date: date | None,
        booking_time: time | None,
        is_asap: bool = False,
        explicit_duration_hours: Decimal | None = None,
    ) -> Quote | None:
        """Surge evaluation then pricing against the current configuration."""
        config = await self.config_store.get_pricing_config()
        catalog = await self.config_store.get_task_catalog()
        multiplier = evaluate_surge(config, booking_date, booking_time, is_asap)
        return price(
            config,
            catalog,
            task_ids,
            surge_multiplier=multiplier,
            explicit_duration_hours=explicit_duration_hours,
        )

    async def create_booking(self, request: BookingRequest) -> BookingRecord:
        """
        Price and persist a booking, then spawn its shift.

        Raises:
            OutsideServiceArea: the caller's coverage check failed
            NoServicesSelected: nothing priceable was selected
        """
        if not request.within_coverage:
            raise OutsideServiceArea(f"Address {request.postal_code or request.service_address} is outside the service area")

        catalog = await self.config_store.get_task_catalog()
        quote = await self.quote(
            request.task_ids,
            request.scheduled_date,
            request.scheduled_start,
            request.is_asap,
            request.explicit_duration_hours,
        )
        if quote is None or not catalog.resolve(request.task_ids):
            raise NoServicesSelected("Select at least one available service")

        booking = BookingRecord(
            client_id=request.client_id,
            client_name=request.client_name,
            client_email=request.client_email,
            client_phone=request.client_phone,
            patient_name=request.patient_name,
            service_address=request.service_address,
            postal_code=request.postal_code,
            special_instructions=request.special_instructions,
            task_ids=list(request.task_ids),
            category=quote.category.value,
            scheduled_date=request.scheduled_date,
            scheduled_start=request.scheduled_start,
            scheduled_end=request.scheduled_end,
            is_asap=request.is_asap,
            surge_multiplier=quote.surge_multiplier,
            base_minutes=quote.base_minutes,
            base_cost=quote.base_cost,
            base_charge=quote.base_charge,
            hst_amount=quote.hst_amount,
            surge_amount=quote.surge_amount,
            subtotal=quote.subtotal,
            total=quote.total,
            is_minimum_fee_applied=quote.is_minimum_fee_applied,
            overtime_charge=Decimal("0.00"),
            payment_status=PaymentStatus.INVOICE_PENDING.value,
            status=BookingStatus.PENDING.value,
        )
        self.db.add(booking)
        await self.db.flush()

        await self.lifecycle.create_from_booking(booking, catalog)
        await self.db.commit()
        await self.db.refresh(booking)
        logger.info(f"Booking {booking.id} created for {request.client_id}: total ${quote.total}")

        notify(
            self.notifier,
            Notification(
                event=NotificationEvent.BOOKING_CONFIRMED,
                recipient=booking.client_email,
                payload={
                    "client_name": booking.client_name,
                    "booking_id": str(booking.id),
                    "service_date": booking.scheduled_date.isoformat(),
                    "start_time": booking.scheduled_start.strftime("%H:%M"),
                    "services": catalog.service_names(booking.task_ids),
                    "total": f"{quote.total:.2f}",
                },
            ),
        )
        return booking

    async def cancel_booking(self, booking_id: UUID, now: datetime | None = None) -> CancellationResult:
        """
        Cancel a pending or active booking.

        A paid booking cancelled inside the refund window becomes refunded.
        A claimed shift is released in the same transaction; the shift can
        no longer be checked into or signed out of.
        """
        booking = await self.get(booking_id)
        if booking.status not in CANCELLABLE_STATUSES:
            raise InvalidBookingState(f"Booking {booking_id} cannot be cancelled from {booking.status}")

        settings = self.lifecycle.settings
        eligible, hours_until_start = check_cancellation_refund(
            booking.scheduled_date,
            booking.scheduled_start,
            booking.is_asap,
            now or self.lifecycle.clock(),
            settings.cancellation_refund_hours,
        )

        booking.status = BookingStatus.CANCELLED.value
        booking.refund_eligible = eligible
        if eligible and booking.payment_status == PaymentStatus.PAID.value:
            booking.payment_status = PaymentStatus.REFUNDED.value
        await self.lifecycle.release_claim(booking.id)
        await self.db.commit()

        logger.info(
            f"Booking {booking_id} cancelled {hours_until_start:.1f}h before start "
            f"(refund eligible: {eligible})"
        )
        return CancellationResult(
            booking_id=booking.id,
            refund_eligible=eligible,
            payment_status=PaymentStatus(booking.payment_status),
            hours_until_start=round(hours_until_start, 2),
        )

    async def archive_booking(self, booking_id: UUID) -> BookingRecord:
        booking = await self.get(booking_id)
        if booking.status == BookingStatus.ARCHIVED.value:
            raise InvalidBookingState(f"Booking {booking_id} is already archived")

        booking.archived_from_status = booking.status
        booking.status = BookingStatus.ARCHIVED.value
        await self.db.commit()
        logger.info(f"Booking {booking_id} archived from {booking.archived_from_status}")
        return booking

    async def restore_booking(self, booking_id: UUID) -> BookingRecord:
        booking = await self.get(booking_id)
        if booking.status != BookingStatus.ARCHIVED.value:
            raise InvalidBookingState(f"Booking {booking_id} is not archived")

        booking.status = booking.archived_from_status or BookingStatus.PENDING.value
        booking.archived_from_status = None
        await self.db.commit()
        logger.info(f"Booking {booking_id} restored to {booking.status}")
        return booking

    async def mark_paid(self, booking_id: UUID) -> BookingRecord:
        booking = await self.get(booking_id)
        if booking.payment_status != PaymentStatus.INVOICE_PENDING.value:
            raise InvalidBookingState(f"Booking {booking_id} payment is {booking.payment_status}")
        booking.payment_status = PaymentStatus.PAID.value
        await self.db.commit()
        return booking
