"""
Quote API Routes

On-the-fly pricing for the booking wizard.
"""

from fastapi import APIRouter, Depends

from backend.middleware.rbac import CurrentUser, Permission, require_permission
from backend.routers.v1.deps import get_booking_service
from backend.schemas.booking import QuoteRequest, QuoteResponse
from backend.services.booking_service import BookingService

router = APIRouter()


@router.post(
    "",
    response_model=QuoteResponse,
    summary="Price a booking",
    description="Evaluate surge for the slot and price the selected tasks. "
    "An empty selection returns a null quote.",
)
async def create_quote(
    request: QuoteRequest,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.QUOTE_CREATE)),
) -> QuoteResponse:
    quote = await service.quote(
        request.task_ids,
        request.booking_date,
        request.booking_time,
        request.is_asap,
        request.explicit_duration_hours,
    )
    if quote is None:
        return QuoteResponse(quote=None)
    return QuoteResponse(quote=quote, minimum_fee_adjustment=quote.minimum_fee_adjustment)
