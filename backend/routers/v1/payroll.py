"""
Payroll API Routes

Settlement runs and the settlement export.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from backend.middleware.rbac import CurrentUser, Permission, require_permission
from backend.routers.v1.deps import get_payroll_service
from backend.schemas.payroll import SettlementRequest
from backend.services.payroll_service import PayrollService, SettlementRun

router = APIRouter()


@router.post(
    "/settlements",
    response_model=SettlementRun,
    summary="Settle completed shifts",
    description="Convert completed shifts in the period into payroll entries. "
    "Re-running over the same shifts yields identical entries.",
)
async def create_settlement(
    request: SettlementRequest,
    service: PayrollService = Depends(get_payroll_service),
    user: CurrentUser = Depends(require_permission(Permission.PAYROLL_SETTLE)),
) -> SettlementRun:
    return await service.run(
        request.period_start,
        request.period_end,
        overrides=request.overrides,
        persist=request.persist,
        worker_id=request.worker_id,
    )


@router.get(
    "/export",
    response_class=PlainTextResponse,
    summary="Export settlement report",
    description="CSV report with one row per worker (or per entry) and a TOTAL row. "
    "Persisted entries, including saved corrections, take precedence over a fresh settlement.",
)
async def export_settlement(
    period_start: date = Query(...),
    period_end: date = Query(...),
    by_worker: bool = Query(True),
    service: PayrollService = Depends(get_payroll_service),
    user: CurrentUser = Depends(require_permission(Permission.PAYROLL_EXPORT)),
) -> PlainTextResponse:
    if period_end < period_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_end must not be before period_start",
        )
    report = await service.export(period_start, period_end, by_worker=by_worker)
    filename = f"payroll-{period_start.isoformat()}-to-{period_end.isoformat()}.csv"
    return PlainTextResponse(
        report,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
