"""Pydantic API Schemas for PSW Direct."""

from backend.schemas.admin import AssignWorkerRequest
from backend.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    CancellationResponse,
    QuoteRequest,
    QuoteResponse,
)
from backend.schemas.payroll import SettlementRequest
from backend.schemas.shift import (
    CheckInRequest,
    ShiftListResponse,
    SignOutRequest,
    SignOutResponse,
)

__all__ = [
    "AssignWorkerRequest",
    "BookingCreate",
    "BookingListResponse",
    "BookingResponse",
    "CancellationResponse",
    "QuoteRequest",
    "QuoteResponse",
    "SettlementRequest",
    "CheckInRequest",
    "ShiftListResponse",
    "SignOutRequest",
    "SignOutResponse",
]
