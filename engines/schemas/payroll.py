"""
Payroll Settlement Schemas

Pay rates, payroll entries, admin overrides and settlement summaries.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from engines.schemas.pricing import TaskCategory


class RatePolicy(str, Enum):
    """Which pay rate a settlement run uses."""

    SNAPSHOT = "snapshot"  # rate stored on the shift at sign-out
    LIVE = "live"  # current PayRates at settlement time


class PayRates(BaseModel):
    """Worker hourly pay rates per shift category."""

    standard: Decimal = Field(default=Decimal("22.00"), ge=0)
    hospital: Decimal = Field(default=Decimal("28.00"), ge=0)
    doctor: Decimal = Field(default=Decimal("25.00"), ge=0)

    def for_category(self, category: TaskCategory) -> Decimal:
        return getattr(self, category.value)


class PayrollOverride(BaseModel):
    """
    Admin correction applied at settlement time.

    Shifts are never mutated after completion; corrections replace the
    measured hours and/or overtime minutes for one settlement run.
    """

    shift_id: UUID
    hours_worked: Decimal | None = Field(default=None, ge=0)
    overtime_minutes: int | None = Field(default=None, ge=0)
    reason: str = Field(..., min_length=1)


class PayrollEntry(BaseModel):
    """Derived payroll line for one completed shift."""

    model_config = ConfigDict(from_attributes=True)

    worker_id: str
    worker_name: str
    shift_id: UUID
    date: date
    hours_worked: Decimal
    overtime_minutes: int = 0
    shift_category: TaskCategory
    pay_rate: Decimal
    base_pay: Decimal
    overtime_pay: Decimal
    total_pay: Decimal
    rate_source: RatePolicy = RatePolicy.LIVE
    adjusted: bool = False


class DailyPayrollSummary(BaseModel):
    """Entries reduced by shift date."""

    date: date
    total_shifts: int
    total_hours: Decimal
    total_owed: Decimal
    shifts_by_category: dict[TaskCategory, int]
    entries: list[PayrollEntry]


class WorkerPayrollSummary(BaseModel):
    """Entries reduced by worker."""

    worker_id: str
    worker_name: str
    total_hours: Decimal
    total_pay: Decimal
    shift_count: int
    standard_shifts: int
    hospital_shifts: int
    doctor_shifts: int
