"""
Shift API Routes

Job board and the worker-facing shift transitions.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from backend.middleware.rbac import CurrentUser, Permission, Role, require_permission
from backend.routers.v1.deps import get_config_store, get_lifecycle, shift_http_error
from backend.schemas.shift import CheckInRequest, ShiftListResponse, SignOutRequest, SignOutResponse
from backend.services.config_store import ConfigStore
from backend.services.shift_lifecycle import ShiftLifecycleManager, ShiftNotFound, ShiftTransitionError
from engines.schemas.shift import Shift

router = APIRouter()


def _acting_worker(user: CurrentUser) -> str | None:
    """Workers act on their own shifts; admins may act on any."""
    return None if user.role == Role.ADMIN else user.id


@router.get("/available", response_model=ShiftListResponse, summary="Open shifts")
async def list_available_shifts(
    on_date: date | None = Query(None, alias="date"),
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_READ)),
) -> ShiftListResponse:
    shifts = await lifecycle.list_available(on_date)
    return ShiftListResponse(items=shifts, total=len(shifts))


@router.get("/mine", response_model=ShiftListResponse, summary="My shifts")
async def list_my_shifts(
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_READ)),
) -> ShiftListResponse:
    shifts = await lifecycle.list_for_worker(user.id)
    return ShiftListResponse(items=shifts, total=len(shifts))


@router.get("/{shift_id}", response_model=Shift, summary="Get shift")
async def get_shift(
    shift_id: UUID,
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_READ)),
) -> Shift:
    try:
        return await lifecycle.get(shift_id)
    except ShiftNotFound as e:
        raise shift_http_error(e)


@router.post(
    "/{shift_id}/claim",
    response_model=Shift,
    summary="Claim shift",
    description="Take an available shift. Exactly one of several concurrent claimants succeeds; "
    "the others receive 409.",
)
async def claim_shift(
    shift_id: UUID,
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_WORK)),
) -> Shift:
    try:
        return await lifecycle.claim(shift_id, user.id, user.name or user.id)
    except (ShiftTransitionError, ShiftNotFound) as e:
        raise shift_http_error(e)


@router.post("/{shift_id}/check-in", response_model=Shift, summary="Check in")
async def check_in(
    shift_id: UUID,
    request: CheckInRequest,
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_WORK)),
) -> Shift:
    try:
        return await lifecycle.check_in(shift_id, request.location, worker_id=_acting_worker(user))
    except (ShiftTransitionError, ShiftNotFound) as e:
        raise shift_http_error(e)


@router.post(
    "/{shift_id}/sign-out",
    response_model=SignOutResponse,
    summary="Sign out",
    description="Complete the shift with its care record. Overtime is measured against the "
    "scheduled end and flagged at the grace threshold.",
)
async def sign_out(
    shift_id: UUID,
    request: SignOutRequest,
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    config_store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.SHIFT_WORK)),
) -> SignOutResponse:
    config = await config_store.get_pricing_config()
    pay_rates = await config_store.get_pay_rates()
    try:
        result = await lifecycle.sign_out(
            shift_id,
            request.care_record,
            config,
            pay_rates,
            worker_id=_acting_worker(user),
            notify_email=request.notify_email,
        )
    except (ShiftTransitionError, ShiftNotFound) as e:
        raise shift_http_error(e)
    return SignOutResponse(
        shift=result.shift,
        overtime=result.overtime,
        overtime_charge=result.overtime_charge,
    )
