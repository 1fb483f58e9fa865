"""
Shift Pydantic Schemas

API request/response models for the job board and shift transitions.
"""

from pydantic import BaseModel, Field

from engines.schemas.shift import CareRecord, CheckInLocation, Shift
from engines.services.overtime import OvertimeCharge, OvertimeDetermination


class CheckInRequest(BaseModel):
    """Worker arrival."""

    location: CheckInLocation | None = Field(
        default=None,
        description="GPS position at arrival",
    )


class SignOutRequest(BaseModel):
    """Worker departure with the care sheet."""

    care_record: CareRecord
    notify_email: str | None = Field(
        default=None,
        max_length=255,
        description="Recipient of the care summary; defaults to the booking contact",
    )


class ShiftListResponse(BaseModel):
    items: list[Shift]
    total: int


class SignOutResponse(BaseModel):
    """Completed shift with its overtime audit."""

    shift: Shift
    overtime: OvertimeDetermination
    overtime_charge: OvertimeCharge
