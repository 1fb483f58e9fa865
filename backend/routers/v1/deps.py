"""
Shared Route Dependencies

Service objects wired to the request's database session.
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.db.session import get_db
from backend.services.booking_service import BookingNotFound, BookingService, InvalidBookingState
from backend.services.config_store import ConfigStore
from backend.services.notifications import CeleryNotifier, LoggingNotifier, Notifier
from backend.services.payroll_service import PayrollService
from backend.services.shift_lifecycle import NotAssignedWorker, ShiftLifecycleManager, ShiftNotFound


def get_notifier() -> Notifier:
    """Celery delivery outside development; log-only in development."""
    if get_settings().environment == "development":
        return LoggingNotifier()
    return CeleryNotifier()


async def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ShiftLifecycleManager:
    return ShiftLifecycleManager(db, notifier=notifier)


async def get_booking_service(
    db: AsyncSession = Depends(get_db),
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    notifier: Notifier = Depends(get_notifier),
) -> BookingService:
    return BookingService(db, lifecycle, notifier=notifier)


async def get_config_store(db: AsyncSession = Depends(get_db)) -> ConfigStore:
    return ConfigStore(db)


async def get_payroll_service(db: AsyncSession = Depends(get_db)) -> PayrollService:
    return PayrollService(db)


def shift_http_error(exc: Exception) -> HTTPException:
    """Translate lifecycle errors: unknown shift 404, wrong state 409."""
    if isinstance(exc, ShiftNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, NotAssignedWorker):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def booking_http_error(exc: Exception) -> HTTPException:
    """Translate booking errors: unknown booking 404, wrong state 409, bad input 400."""
    if isinstance(exc, BookingNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvalidBookingState):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
