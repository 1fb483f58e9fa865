"""
Booking API Routes

Client booking creation, listing and cancellation.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from backend.middleware.rbac import CurrentUser, Permission, Role, require_permission
from backend.models.booking import BookingRecord
from backend.routers.v1.deps import booking_http_error, get_booking_service
from backend.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    CancellationResponse,
)
from backend.services.booking_service import BookingError, BookingNotFound, BookingRequest, BookingService

router = APIRouter()


def _ensure_owner(booking: BookingRecord, user: CurrentUser) -> None:
    if user.role != Role.ADMIN and booking.client_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking.id} not found",
        )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
    description="Price the booking, persist it with its quote and post its shift to the job board.",
)
async def create_booking(
    request: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_CREATE)),
) -> BookingResponse:
    try:
        booking = await service.create_booking(
            BookingRequest(client_id=user.id, **request.model_dump())
        )
    except BookingError as e:
        raise booking_http_error(e)
    return BookingResponse.model_validate(booking)


@router.get("", response_model=BookingListResponse, summary="List bookings")
async def list_bookings(
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_READ)),
) -> BookingListResponse:
    """Clients see their own bookings; admins see every booking."""
    client_id = None if user.role == Role.ADMIN else user.id
    bookings = await service.list_bookings(client_id=client_id)
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get booking")
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_READ)),
) -> BookingResponse:
    try:
        booking = await service.get(booking_id)
    except BookingNotFound as e:
        raise booking_http_error(e)
    _ensure_owner(booking, user)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=CancellationResponse,
    summary="Cancel booking",
    description="Cancel a pending or active booking. Refundable when not ASAP and "
    "cancelled at least the refund window before the scheduled start.",
)
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_CANCEL)),
) -> CancellationResponse:
    try:
        _ensure_owner(await service.get(booking_id), user)
        result = await service.cancel_booking(booking_id)
    except (BookingError, BookingNotFound) as e:
        raise booking_http_error(e)
    return CancellationResponse(
        booking_id=result.booking_id,
        refund_eligible=result.refund_eligible,
        payment_status=result.payment_status.value,
        hours_until_start=result.hours_until_start,
    )
