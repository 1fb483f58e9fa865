"""SQLAlchemy ORM Models for PSW Direct."""

from backend.models.base import Base, TimestampMixin
from backend.models.booking import BookingRecord, BookingStatus, PaymentStatus
from backend.models.payroll_entry import PayrollEntryRecord
from backend.models.settings_document import ConfigDocument, ServiceTask
from backend.models.shift import ShiftRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "BookingRecord",
    "BookingStatus",
    "PaymentStatus",
    "ShiftRecord",
    "PayrollEntryRecord",
    "ConfigDocument",
    "ServiceTask",
]
