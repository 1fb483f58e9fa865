"""
Booking Pydantic Schemas

API request/response models for quote and booking endpoints.
"""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from engines.schemas.pricing import Quote


class QuoteRequest(BaseModel):
    """Inputs for an on-the-fly price quote."""

    task_ids: list[str] = Field(default_factory=list, description="Selected service task ids")
    booking_date: date | None = None
    booking_time: time | None = None
    is_asap: bool = False
    explicit_duration_hours: Decimal | None = Field(default=None, ge=0)


class QuoteResponse(BaseModel):
    """Quote, or null while nothing is selected."""

    quote: Quote | None
    minimum_fee_adjustment: Decimal = Decimal("0.00")


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: str = Field(..., min_length=3, max_length=255)
    client_phone: str | None = Field(default=None, max_length=50)
    patient_name: str | None = Field(default=None, max_length=255)
    service_address: str = Field(..., min_length=1)
    postal_code: str | None = Field(default=None, max_length=10)
    special_instructions: str | None = None
    within_coverage: bool = Field(
        default=True,
        description="Result of the caller's service-area check",
    )
    task_ids: list[str] = Field(..., min_length=1)
    scheduled_date: date
    scheduled_start: time
    scheduled_end: time
    is_asap: bool = False
    explicit_duration_hours: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _window_not_empty(self) -> "BookingCreate":
        if self.scheduled_start == self.scheduled_end:
            raise ValueError("scheduled_end must differ from scheduled_start")
        return self


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: str
    client_name: str
    client_email: str
    patient_name: str | None
    service_address: str
    postal_code: str | None
    task_ids: list[str]
    category: str
    scheduled_date: date
    scheduled_start: time
    scheduled_end: time
    is_asap: bool

    surge_multiplier: Decimal
    base_minutes: int
    base_cost: Decimal
    base_charge: Decimal
    hst_amount: Decimal
    surge_amount: Decimal
    subtotal: Decimal
    total: Decimal
    is_minimum_fee_applied: bool
    overtime_charge: Decimal

    payment_status: str
    status: str
    archived_from_status: str | None
    refund_eligible: bool | None
    created_at: datetime


class BookingListResponse(BaseModel):
    """Bookings list."""

    items: list[BookingResponse]
    total: int


class CancellationResponse(BaseModel):
    """Outcome of a cancellation."""

    booking_id: UUID
    refund_eligible: bool
    payment_status: str
    hours_until_start: float
