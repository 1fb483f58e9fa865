"""
Admin API Routes

Pricing configuration, pay rates, the service task catalog and booking
management for the back office.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.db.session import get_db
from backend.middleware.rbac import CurrentUser, Permission, require_permission
from backend.models.shift import ShiftRecord
from backend.routers.v1.deps import (
    booking_http_error,
    get_booking_service,
    get_config_store,
    get_lifecycle,
    shift_http_error,
)
from backend.schemas.admin import AssignWorkerRequest
from backend.schemas.booking import BookingListResponse, BookingResponse
from backend.services.booking_service import BookingError, BookingNotFound, BookingService
from backend.services.config_store import ConfigStore
from backend.services.shift_lifecycle import ShiftLifecycleManager, ShiftNotFound, ShiftTransitionError
from engines.schemas.payroll import PayRates
from engines.schemas.pricing import PricingConfig, TaskDefinition
from engines.schemas.shift import Shift

router = APIRouter()


# --- Pricing configuration ---


@router.get("/pricing-config", response_model=PricingConfig)
async def get_pricing_config(
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    """Current pricing configuration, including surge rules."""
    return await store.get_pricing_config()


@router.put("/pricing-config", response_model=PricingConfig)
async def save_pricing_config(
    request: dict,
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    """Save pricing configuration. Out-of-range overtime settings are clamped."""
    try:
        return await store.save_pricing_config(request, updated_by=user.id)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# --- Pay rates ---


@router.get("/pay-rates", response_model=PayRates)
async def get_pay_rates(
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    return await store.get_pay_rates()


@router.put("/pay-rates", response_model=PayRates)
async def save_pay_rates(
    request: PayRates,
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    """Save worker pay rates. Completed shifts keep the rate stored at sign-out."""
    return await store.save_pay_rates(request.model_dump(), updated_by=user.id)


# --- Service tasks ---


@router.get("/tasks", response_model=list[TaskDefinition])
async def list_tasks(
    include_inactive: bool = Query(True),
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    catalog = await store.get_task_catalog()
    return catalog.all(include_inactive=include_inactive)


@router.put("/tasks/{task_id}", response_model=TaskDefinition)
async def save_task(
    task_id: str,
    request: TaskDefinition,
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    if request.id != task_id:
        raise HTTPException(status_code=400, detail="Task id in path and body differ")
    return await store.upsert_task(request)


@router.delete("/tasks/{task_id}", response_model=TaskDefinition)
async def disable_task(
    task_id: str,
    store: ConfigStore = Depends(get_config_store),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN_SETTINGS)),
):
    """Soft-disable a task; historical shifts keep referring to it."""
    task = await store.disable_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return task


# --- Booking management ---


@router.get("/bookings", response_model=BookingListResponse)
async def list_all_bookings(
    include_archived: bool = Query(False),
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_MANAGE)),
):
    bookings = await service.list_bookings(include_archived=include_archived)
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.post("/bookings/{booking_id}/archive", response_model=BookingResponse)
async def archive_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_MANAGE)),
):
    try:
        return BookingResponse.model_validate(await service.archive_booking(booking_id))
    except (BookingError, BookingNotFound) as e:
        raise booking_http_error(e)


@router.post("/bookings/{booking_id}/restore", response_model=BookingResponse)
async def restore_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_MANAGE)),
):
    try:
        return BookingResponse.model_validate(await service.restore_booking(booking_id))
    except (BookingError, BookingNotFound) as e:
        raise booking_http_error(e)


@router.post("/bookings/{booking_id}/mark-paid", response_model=BookingResponse)
async def mark_booking_paid(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_MANAGE)),
):
    try:
        return BookingResponse.model_validate(await service.mark_paid(booking_id))
    except (BookingError, BookingNotFound) as e:
        raise booking_http_error(e)


@router.post("/bookings/{booking_id}/assign-worker", response_model=Shift)
async def assign_worker(
    booking_id: UUID,
    request: AssignWorkerRequest,
    db: AsyncSession = Depends(get_db),
    lifecycle: ShiftLifecycleManager = Depends(get_lifecycle),
    user: CurrentUser = Depends(require_permission(Permission.BOOKING_MANAGE)),
):
    """Claim the booking's shift on a worker's behalf (same rules as a worker claim)."""
    result = await db.execute(select(ShiftRecord.id).where(ShiftRecord.booking_id == booking_id))
    shift_id = result.scalar_one_or_none()
    if shift_id is None:
        raise HTTPException(status_code=404, detail=f"No shift for booking {booking_id}")
    try:
        return await lifecycle.claim(shift_id, request.worker_id, request.worker_name)
    except (ShiftTransitionError, ShiftNotFound) as e:
        raise shift_http_error(e)
