"""
Shift Schemas

Operational shift record and the worker-submitted care record.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from engines.schemas.pricing import TaskCategory


class ShiftStatus(str, Enum):
    """
    Shift status (forward-only state machine).

    available -> claimed -> checked-in -> completed
    """

    AVAILABLE = "available"
    CLAIMED = "claimed"
    CHECKED_IN = "checked-in"
    COMPLETED = "completed"


class CheckInLocation(BaseModel):
    """GPS position reported by the worker at check-in."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CareRecord(BaseModel):
    """Care sheet submitted by the worker at sign-out."""

    worker_first_name: str
    mood_on_arrival: str = ""
    mood_on_departure: str = ""
    tasks_completed: list[str] = Field(default_factory=list)
    observations: str = ""
    office_number: str | None = None

    # Hospital discharge protocol
    is_hospital_discharge: bool = False
    discharge_notes: str | None = None


class Shift(BaseModel):
    """
    Operational record a worker claims, checks into and signs out of.

    The booking records what the client agreed to pay; the shift records
    what actually happened.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    worker_id: str | None = None
    worker_name: str | None = None
    services: list[str] = Field(default_factory=list)
    category: TaskCategory | None = None

    scheduled_date: date
    scheduled_start: time
    scheduled_end: time

    claimed_at: datetime | None = None
    checked_in_at: datetime | None = None
    check_in_location: CheckInLocation | None = None
    signed_out_at: datetime | None = None

    overtime_minutes: int = Field(default=0, ge=0)
    flagged_for_overtime: bool = False
    care_record: CareRecord | None = None
    pay_rate_snapshot: Decimal | None = None

    status: ShiftStatus = ShiftStatus.AVAILABLE

    @model_validator(mode="after")
    def _timestamps_follow_lifecycle(self) -> "Shift":
        if self.checked_in_at is not None and self.claimed_at is None:
            raise ValueError("checked_in_at requires claimed_at")
        if self.signed_out_at is not None and self.checked_in_at is None:
            raise ValueError("signed_out_at requires checked_in_at")
        return self
