"""
Payroll Run Service

Loads completed shifts for a period, settles them with the current pay
rates and optionally persists the entries.
"""

import logging
from collections.abc import Sequence
from datetime import date

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.models.payroll_entry import PayrollEntryRecord
from backend.models.shift import ShiftRecord
from backend.services.config_store import ConfigStore
from engines.schemas.payroll import (
    DailyPayrollSummary,
    PayrollEntry,
    PayrollOverride,
    RatePolicy,
    WorkerPayrollSummary,
)
from engines.schemas.pricing import TaskCategory
from engines.schemas.shift import Shift, ShiftStatus
from engines.services.payroll_settlement import group_by_date, group_by_worker, settle
from engines.services.settlement_export import export_settlement

logger = logging.getLogger(__name__)


class SettlementRun(BaseModel):
    """Result of settling one period."""

    period_start: date
    period_end: date
    rate_policy: RatePolicy
    entries: list[PayrollEntry]
    by_date: list[DailyPayrollSummary]
    by_worker: list[WorkerPayrollSummary]
    persisted: bool = False


class PayrollService:
    """Settlement runs over persisted shifts."""

    def __init__(self, db: AsyncSession, rate_policy: RatePolicy | None = None):
        self.db = db
        self.rate_policy = rate_policy or get_settings().payroll_rate_policy
        self.config_store = ConfigStore(db)

    async def completed_shifts(self, period_start: date, period_end: date, worker_id: str | None = None) -> list[Shift]:
        stmt = (
            select(ShiftRecord)
            .where(
                ShiftRecord.status == ShiftStatus.COMPLETED.value,
                ShiftRecord.scheduled_date >= period_start,
                ShiftRecord.scheduled_date <= period_end,
            )
            .order_by(ShiftRecord.scheduled_date, ShiftRecord.id)
        )
        if worker_id is not None:
            stmt = stmt.where(ShiftRecord.worker_id == worker_id)
        result = await self.db.execute(stmt)
        return [Shift.model_validate(row) for row in result.scalars().all()]

    async def run(
        self,
        period_start: date,
        period_end: date,
        overrides: Sequence[PayrollOverride] | None = None,
        persist: bool = False,
        worker_id: str | None = None,
    ) -> SettlementRun:
        """
        Settle completed shifts scheduled within [period_start, period_end].

        Reading is idempotent. With ``persist`` the entries replace any
        previously stored entries for the same shifts.
        """
        if period_end < period_start:
            raise ValueError("period_end must not be before period_start")

        shifts = await self.completed_shifts(period_start, period_end, worker_id)
        pay_rates = await self.config_store.get_pay_rates()
        entries = settle(shifts, pay_rates, rate_policy=self.rate_policy, overrides=overrides)
        logger.info(
            f"Settled {len(entries)} shifts for {period_start} to {period_end} "
            f"({self.rate_policy.value} rates)"
        )

        if persist:
            await self._replace_entries(entries, overrides or ())

        return SettlementRun(
            period_start=period_start,
            period_end=period_end,
            rate_policy=self.rate_policy,
            entries=entries,
            by_date=group_by_date(entries),
            by_worker=group_by_worker(entries),
            persisted=persist,
        )

    async def _replace_entries(self, entries: Sequence[PayrollEntry], overrides: Sequence[PayrollOverride]) -> None:
        if not entries:
            return
        reasons = {o.shift_id: o.reason for o in overrides}
        shift_ids = [e.shift_id for e in entries]

        await self.db.execute(delete(PayrollEntryRecord).where(PayrollEntryRecord.shift_id.in_(shift_ids)))
        for entry in entries:
            self.db.add(
                PayrollEntryRecord(
                    shift_id=entry.shift_id,
                    worker_id=entry.worker_id,
                    worker_name=entry.worker_name,
                    shift_date=entry.date,
                    hours_worked=entry.hours_worked,
                    overtime_minutes=entry.overtime_minutes,
                    shift_category=entry.shift_category.value,
                    pay_rate=entry.pay_rate,
                    base_pay=entry.base_pay,
                    overtime_pay=entry.overtime_pay,
                    total_pay=entry.total_pay,
                    rate_source=entry.rate_source.value,
                    adjusted=entry.adjusted,
                    adjustment_reason=reasons.get(entry.shift_id),
                )
            )
        await self.db.commit()
        logger.info(f"Persisted {len(entries)} payroll entries")

    async def stored_entries(self, period_start: date, period_end: date) -> list[PayrollEntry]:
        """Entries persisted by earlier runs, including admin corrections."""
        result = await self.db.execute(
            select(PayrollEntryRecord).where(
                PayrollEntryRecord.shift_date >= period_start,
                PayrollEntryRecord.shift_date <= period_end,
            )
        )
        return [
            PayrollEntry(
                worker_id=row.worker_id,
                worker_name=row.worker_name,
                shift_id=row.shift_id,
                date=row.shift_date,
                hours_worked=row.hours_worked,
                overtime_minutes=row.overtime_minutes,
                shift_category=TaskCategory(row.shift_category),
                pay_rate=row.pay_rate,
                base_pay=row.base_pay,
                overtime_pay=row.overtime_pay,
                total_pay=row.total_pay,
                rate_source=RatePolicy(row.rate_source),
                adjusted=row.adjusted,
            )
            for row in result.scalars().all()
        ]

    async def export(self, period_start: date, period_end: date, by_worker: bool = True) -> str:
        """
        Render the settlement report for a period.

        Shifts with a persisted entry are reported as persisted, so saved
        corrections carry into the export; the rest are settled fresh.
        """
        run = await self.run(period_start, period_end)
        stored = {entry.shift_id: entry for entry in await self.stored_entries(period_start, period_end)}
        entries = [stored.get(entry.shift_id, entry) for entry in run.entries]
        if stored:
            logger.info(f"Export uses {len(stored)} persisted entries for {period_start} to {period_end}")
        return export_settlement(entries, period_start, period_end, by_worker=by_worker)
