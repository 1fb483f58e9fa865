"""
Shift Lifecycle Manager

Owns the forward-only shift state machine:

    available --claim--> claimed --check_in--> checked-in --sign_out--> completed

Every transition is a single conditional UPDATE keyed on the persisted
status, committed in its own transaction. Two workers racing for the same
shift both issue the UPDATE; the store lets exactly one of them match.
Notifications go out only after the commit and never fail a transition.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.models.booking import BookingRecord, BookingStatus
from backend.models.shift import ShiftRecord
from backend.services.notifications import Notification, NotificationEvent, Notifier, notify
from engines.schemas.payroll import PayRates
from engines.schemas.pricing import PricingConfig
from engines.schemas.shift import CareRecord, CheckInLocation, Shift, ShiftStatus
from engines.services.overtime import (
    OvertimeCharge,
    OvertimeDetermination,
    calculate_overtime_charge,
    determine_overtime,
    scheduled_end_datetime,
)
from engines.services.payroll_settlement import shift_category
from engines.services.task_catalog import TaskCatalog

logger = logging.getLogger(__name__)

# Booking states in which the shift can no longer be worked
CLOSED_BOOKING_STATUSES = (BookingStatus.CANCELLED.value, BookingStatus.ARCHIVED.value)


class ShiftTransitionError(Exception):
    """A transition was attempted from the wrong state. The shift is unchanged."""

    def __init__(self, shift_id: UUID, status: ShiftStatus, message: str):
        self.shift_id = shift_id
        self.status = status
        super().__init__(message)


class AlreadyClaimed(ShiftTransitionError):
    def __init__(self, shift_id: UUID, status: ShiftStatus):
        super().__init__(shift_id, status, f"Shift {shift_id} is no longer available (status: {status.value})")


class NotClaimed(ShiftTransitionError):
    def __init__(self, shift_id: UUID, status: ShiftStatus):
        super().__init__(shift_id, status, f"Shift {shift_id} must be claimed before check-in (status: {status.value})")


class NotCheckedIn(ShiftTransitionError):
    def __init__(self, shift_id: UUID, status: ShiftStatus):
        super().__init__(shift_id, status, f"Shift {shift_id} must be checked in before sign-out (status: {status.value})")


class ShiftUnavailable(ShiftTransitionError):
    def __init__(self, shift_id: UUID, status: ShiftStatus):
        super().__init__(shift_id, status, f"Shift {shift_id} belongs to a cancelled or archived booking")


class NotAssignedWorker(ShiftTransitionError):
    def __init__(self, shift_id: UUID, status: ShiftStatus):
        super().__init__(shift_id, status, f"Shift {shift_id} is assigned to another worker")


class ShiftNotFound(LookupError):
    def __init__(self, shift_id: UUID):
        self.shift_id = shift_id
        super().__init__(f"Shift {shift_id} not found")


class SignOutResult(BaseModel):
    """Completed shift together with its overtime audit."""

    shift: Shift
    overtime: OvertimeDetermination
    overtime_charge: OvertimeCharge


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in the service zone, as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


class ShiftLifecycleManager:
    """
    Transitions shifts and keeps the owning booking's status in step.

    Args:
        db: Async session; each transition commits it
        notifier: Fire-and-forget notification sink (None disables notifications)
        clock: Returns the current naive local time
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.notifier = notifier
        self.settings = get_settings()
        self.clock = clock or (lambda: local_now(self.settings.timezone))

    # ── Reads ───────────────────────────────────

    async def _load(self, shift_id: UUID) -> ShiftRecord:
        result = await self.db.execute(
            select(ShiftRecord)
            .where(ShiftRecord.id == shift_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise ShiftNotFound(shift_id)
        return row

    async def get(self, shift_id: UUID) -> Shift:
        return Shift.model_validate(await self._load(shift_id))

    async def list_available(self, on_date: date | None = None) -> list[Shift]:
        """Open shifts on the job board, soonest first."""
        stmt = (
            select(ShiftRecord)
            .join(BookingRecord, BookingRecord.id == ShiftRecord.booking_id)
            .where(
                ShiftRecord.status == ShiftStatus.AVAILABLE.value,
                BookingRecord.status.not_in(CLOSED_BOOKING_STATUSES),
            )
            .order_by(ShiftRecord.scheduled_date, ShiftRecord.scheduled_start)
        )
        if on_date is not None:
            stmt = stmt.where(ShiftRecord.scheduled_date == on_date)
        result = await self.db.execute(stmt)
        return [Shift.model_validate(row) for row in result.scalars().all()]

    async def list_for_worker(self, worker_id: str) -> list[Shift]:
        result = await self.db.execute(
            select(ShiftRecord)
            .where(ShiftRecord.worker_id == worker_id)
            .order_by(ShiftRecord.scheduled_date.desc(), ShiftRecord.scheduled_start.desc())
        )
        return [Shift.model_validate(row) for row in result.scalars().all()]

    # ── Creation ────────────────────────────────

    async def create_from_booking(self, booking: BookingRecord, catalog: TaskCatalog) -> Shift:
        """
        Create the single available shift for a booking.

        The category is copied from the booking so settlement never has to
        infer it from service names. Flushed, not committed.
        """
        row = ShiftRecord(
            booking_id=booking.id,
            services=catalog.service_names(booking.task_ids),
            category=booking.category,
            scheduled_date=booking.scheduled_date,
            scheduled_start=booking.scheduled_start,
            scheduled_end=booking.scheduled_end,
            status=ShiftStatus.AVAILABLE.value,
        )
        self.db.add(row)
        await self.db.flush()
        logger.info(f"Shift {row.id} created for booking {booking.id} ({booking.category})")
        return Shift.model_validate(row)

    # ── Transitions ─────────────────────────────

    async def _compare_and_set(self, shift_id: UUID, expected: ShiftStatus, *criteria, **values) -> bool:
        result = await self.db.execute(
            update(ShiftRecord)
            .where(ShiftRecord.id == shift_id, ShiftRecord.status == expected.value, *criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def _open_booking_ids():
        return select(BookingRecord.id).where(BookingRecord.status.not_in(CLOSED_BOOKING_STATUSES))

    async def _booking_closed(self, booking_id: UUID) -> bool:
        booking = await self.db.get(BookingRecord, booking_id, populate_existing=True)
        return booking is None or booking.status in CLOSED_BOOKING_STATUSES

    async def _set_booking_status(self, booking_id: UUID, status: BookingStatus, **values) -> None:
        await self.db.execute(
            update(BookingRecord)
            .where(
                BookingRecord.id == booking_id,
                BookingRecord.status.not_in(CLOSED_BOOKING_STATUSES),
            )
            .values(status=status.value, **values)
            .execution_options(synchronize_session=False)
        )

    async def release_claim(self, booking_id: UUID) -> int:
        """
        Return a claimed shift of a booking to `available`, dropping the worker.

        Used when the booking is cancelled; the shift stays off the job board
        because its booking is closed. Not committed.
        """
        result = await self.db.execute(
            update(ShiftRecord)
            .where(
                ShiftRecord.booking_id == booking_id,
                ShiftRecord.status == ShiftStatus.CLAIMED.value,
            )
            .values(
                status=ShiftStatus.AVAILABLE.value,
                worker_id=None,
                worker_name=None,
                claimed_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info(f"Released claimed shift of cancelled booking {booking_id}")
        return result.rowcount

    async def claim(self, shift_id: UUID, worker_id: str, worker_name: str) -> Shift:
        """
        Claim an available shift for a worker.

        Raises:
            ShiftNotFound: unknown shift id
            AlreadyClaimed: the shift left `available` (another worker won)
            ShiftUnavailable: the booking was cancelled or archived
        """
        claimed = await self._compare_and_set(
            shift_id,
            ShiftStatus.AVAILABLE,
            ShiftRecord.booking_id.in_(self._open_booking_ids()),
            worker_id=worker_id,
            worker_name=worker_name,
            claimed_at=self.clock(),
            status=ShiftStatus.CLAIMED.value,
        )
        if not claimed:
            current = await self._load(shift_id)
            status = ShiftStatus(current.status)
            logger.warning(f"Claim of shift {shift_id} by {worker_id} rejected (status: {status.value})")
            if status == ShiftStatus.AVAILABLE:
                raise ShiftUnavailable(shift_id, status)
            raise AlreadyClaimed(shift_id, status)

        row = await self._load(shift_id)
        await self._set_booking_status(row.booking_id, BookingStatus.ACTIVE)
        await self.db.commit()
        logger.info(f"Shift {shift_id} claimed by {worker_id}")

        shift = Shift.model_validate(row)
        booking = await self.db.get(BookingRecord, row.booking_id)
        if booking is not None:
            notify(
                self.notifier,
                Notification(
                    event=NotificationEvent.JOB_CLAIMED,
                    recipient=booking.client_email,
                    payload={
                        "client_name": booking.client_name,
                        "worker_first_name": worker_name.split(" ")[0] if worker_name else "",
                        "service_date": shift.scheduled_date.isoformat(),
                        "start_time": shift.scheduled_start.strftime("%H:%M"),
                    },
                ),
            )
        return shift

    async def _reject(self, shift_id: UUID, worker_id: str | None, expected: ShiftStatus, error_cls) -> None:
        current = await self._load(shift_id)
        status = ShiftStatus(current.status)
        logger.warning(f"Transition of shift {shift_id} from {expected.value} rejected (status: {status.value})")
        if await self._booking_closed(current.booking_id):
            raise ShiftUnavailable(shift_id, status)
        if status == expected and worker_id is not None and current.worker_id != worker_id:
            raise NotAssignedWorker(shift_id, status)
        raise error_cls(shift_id, status)

    async def check_in(
        self,
        shift_id: UUID,
        location: CheckInLocation | None = None,
        worker_id: str | None = None,
    ) -> Shift:
        """
        Record arrival. When worker_id is given, only the claiming worker may check in.

        Raises:
            ShiftNotFound: unknown shift id
            NotClaimed: the shift is not in `claimed`
            ShiftUnavailable: the booking was cancelled or archived
            NotAssignedWorker: another worker holds the claim
        """
        criteria = [ShiftRecord.booking_id.in_(self._open_booking_ids())]
        if worker_id is not None:
            criteria.append(ShiftRecord.worker_id == worker_id)
        checked_in = await self._compare_and_set(
            shift_id,
            ShiftStatus.CLAIMED,
            *criteria,
            checked_in_at=self.clock(),
            check_in_location=location.model_dump() if location is not None else None,
            status=ShiftStatus.CHECKED_IN.value,
        )
        if not checked_in:
            await self._reject(shift_id, worker_id, ShiftStatus.CLAIMED, NotClaimed)

        row = await self._load(shift_id)
        await self._set_booking_status(row.booking_id, BookingStatus.IN_PROGRESS)
        await self.db.commit()
        logger.info(f"Shift {shift_id} checked in by {row.worker_id}")
        return Shift.model_validate(row)

    async def sign_out(
        self,
        shift_id: UUID,
        care_record: CareRecord,
        config: PricingConfig,
        pay_rates: PayRates,
        worker_id: str | None = None,
        notify_email: str | None = None,
    ) -> SignOutResult:
        """
        Complete a checked-in shift.

        Overtime is measured from the scheduled end (rolled to the next day
        for windows that cross midnight) to the sign-out time. The worker's
        rate for the shift category is stored on the shift, and the client
        overtime charge is recorded on the booking. The care summary goes to
        notify_email when given, otherwise to the booking's contact email.

        Raises:
            ShiftNotFound: unknown shift id
            NotCheckedIn: the shift is not in `checked-in`
            ShiftUnavailable: the booking was cancelled or archived
            NotAssignedWorker: another worker holds the claim
        """
        current = Shift.model_validate(await self._load(shift_id))
        signed_out_at = self.clock()
        determination = determine_overtime(
            scheduled_end_datetime(current.scheduled_date, current.scheduled_start, current.scheduled_end),
            signed_out_at,
            config.overtime_grace_minutes,
        )
        category = shift_category(current)

        criteria = [ShiftRecord.booking_id.in_(self._open_booking_ids())]
        if worker_id is not None:
            criteria.append(ShiftRecord.worker_id == worker_id)
        completed = await self._compare_and_set(
            shift_id,
            ShiftStatus.CHECKED_IN,
            *criteria,
            signed_out_at=signed_out_at,
            overtime_minutes=determination.overtime_minutes,
            flagged_for_overtime=determination.flagged_for_overtime,
            care_record=care_record.model_dump(mode="json"),
            pay_rate_snapshot=pay_rates.for_category(category),
            category=category.value,
            status=ShiftStatus.COMPLETED.value,
        )
        if not completed:
            await self._reject(shift_id, worker_id, ShiftStatus.CHECKED_IN, NotCheckedIn)

        booking = await self.db.get(BookingRecord, current.booking_id)
        hourly_rate = booking.base_cost if booking is not None else config.rate_for(category)
        charge = calculate_overtime_charge(determination.overtime_minutes, hourly_rate, config)
        await self._set_booking_status(
            current.booking_id,
            BookingStatus.COMPLETED,
            overtime_charge=charge.charge,
        )
        await self.db.commit()

        if determination.flagged_for_overtime:
            logger.warning(
                f"Shift {shift_id} signed out {determination.overtime_minutes} min past scheduled end; "
                f"flagged for overtime (charge ${charge.charge})"
            )
        else:
            logger.info(f"Shift {shift_id} completed ({determination.overtime_minutes} min over)")

        shift = Shift.model_validate(await self._load(shift_id))
        if booking is not None:
            await self.db.refresh(booking)
            self._notify_completion(shift, booking, care_record, notify_email or booking.client_email)

        return SignOutResult(shift=shift, overtime=determination, overtime_charge=charge)

    def _notify_completion(self, shift: Shift, booking: BookingRecord, care_record: CareRecord, recipient: str) -> None:
        notify(
            self.notifier,
            Notification(
                event=NotificationEvent.CARE_SUMMARY,
                recipient=recipient,
                payload={
                    "client_name": booking.client_name,
                    "worker_first_name": care_record.worker_first_name,
                    "service_date": shift.scheduled_date.isoformat(),
                    "tasks_completed": care_record.tasks_completed,
                    "observations": care_record.observations,
                    "office_number": care_record.office_number or "",
                },
            ),
        )
        if shift.flagged_for_overtime:
            notify(
                self.notifier,
                Notification(
                    event=NotificationEvent.SHIFT_COMPLETED,
                    recipient=self.settings.office_notification_email,
                    payload={
                        "shift_id": str(shift.id),
                        "worker_name": shift.worker_name or "",
                        "client_name": booking.client_name,
                        "completed_at": shift.signed_out_at.isoformat() if shift.signed_out_at else "",
                        "overtime_minutes": shift.overtime_minutes,
                        "flagged_for_overtime": True,
                    },
                ),
            )
