"""
Payroll Run Service Tests

Settlement runs over persisted shifts: period filtering, rate policy,
idempotent persistence and export.
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from backend.models.payroll_entry import PayrollEntryRecord
from backend.services.config_store import ConfigStore
from backend.services.payroll_service import PayrollService
from engines.schemas.payroll import PayrollOverride, RatePolicy
from engines.schemas.shift import ShiftStatus
from tests.factories import make_booking, make_shift


async def _completed_shift(session, day: date, worker_id: str = "psw-1", worker_name: str = "Alice Martin", **overrides):
    booking = make_booking(scheduled_date=day)
    defaults = dict(
        worker_id=worker_id,
        worker_name=worker_name,
        claimed_at=datetime.combine(day, time(8, 0)),
        checked_in_at=datetime.combine(day, time(9, 0)),
        signed_out_at=datetime.combine(day, time(11, 0)),
        pay_rate_snapshot=Decimal("22.00"),
        status=ShiftStatus.COMPLETED.value,
    )
    defaults.update(overrides)
    shift = make_shift(booking, **defaults)
    session.add_all([booking, shift])
    await session.commit()
    return shift


class TestSettlementRun:

    @pytest.mark.asyncio
    async def test_settles_only_completed_shifts_in_period(self, db_session):
        await _completed_shift(db_session, date(2026, 3, 2))
        await _completed_shift(db_session, date(2026, 3, 20))
        booking = make_booking(scheduled_date=date(2026, 3, 3))
        db_session.add_all([booking, make_shift(booking)])
        await db_session.commit()

        run = await PayrollService(db_session).run(date(2026, 3, 1), date(2026, 3, 14))

        assert len(run.entries) == 1
        entry = run.entries[0]
        assert entry.hours_worked == Decimal("2.00")
        assert entry.total_pay == Decimal("44.00")
        assert run.by_worker[0].worker_name == "Alice Martin"
        assert run.persisted is False

    @pytest.mark.asyncio
    async def test_live_policy_uses_current_rates(self, db_session):
        await _completed_shift(db_session, date(2026, 3, 2))
        await ConfigStore(db_session).save_pay_rates({"standard": "30.00"})

        snapshot = await PayrollService(db_session, RatePolicy.SNAPSHOT).run(date(2026, 3, 1), date(2026, 3, 7))
        live = await PayrollService(db_session, RatePolicy.LIVE).run(date(2026, 3, 1), date(2026, 3, 7))

        assert snapshot.entries[0].pay_rate == Decimal("22.00")
        assert live.entries[0].pay_rate == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_worker_filter(self, db_session):
        await _completed_shift(db_session, date(2026, 3, 2), worker_id="psw-1")
        await _completed_shift(db_session, date(2026, 3, 2), worker_id="psw-2", worker_name="Bob Singh")

        run = await PayrollService(db_session).run(date(2026, 3, 1), date(2026, 3, 7), worker_id="psw-2")

        assert [e.worker_id for e in run.entries] == ["psw-2"]

    @pytest.mark.asyncio
    async def test_inverted_period_rejected(self, db_session):
        with pytest.raises(ValueError):
            await PayrollService(db_session).run(date(2026, 3, 7), date(2026, 3, 1))


class TestPersistence:

    @pytest.mark.asyncio
    async def test_rerun_replaces_entries(self, db_session):
        shift = await _completed_shift(db_session, date(2026, 3, 2), overtime_minutes=30)
        service = PayrollService(db_session)

        await service.run(date(2026, 3, 1), date(2026, 3, 7), persist=True)
        override = PayrollOverride(shift_id=shift.id, overtime_minutes=0, reason="Approved early finish")
        await service.run(date(2026, 3, 1), date(2026, 3, 7), overrides=[override], persist=True)

        count = await db_session.scalar(select(func.count()).select_from(PayrollEntryRecord))
        row = await db_session.scalar(select(PayrollEntryRecord))
        assert count == 1
        assert row.overtime_minutes == 0
        assert row.adjusted is True
        assert row.adjustment_reason == "Approved early finish"

    @pytest.mark.asyncio
    async def test_identical_reruns_identical_entries(self, db_session):
        await _completed_shift(db_session, date(2026, 3, 2))
        await _completed_shift(db_session, date(2026, 3, 3), worker_id="psw-2", worker_name="Bob Singh")
        service = PayrollService(db_session)

        first = await service.run(date(2026, 3, 1), date(2026, 3, 7))
        second = await service.run(date(2026, 3, 1), date(2026, 3, 7))

        assert first.entries == second.entries


class TestExport:

    @pytest.mark.asyncio
    async def test_export_has_total_row(self, db_session):
        await _completed_shift(db_session, date(2026, 3, 2))

        report = await PayrollService(db_session).export(date(2026, 3, 1), date(2026, 3, 7))

        lines = report.splitlines()
        assert lines[0] == "Payroll Export: 2026-03-01 to 2026-03-07"
        assert lines[-1] == "TOTAL,,2.00,,,,44.00"

    @pytest.mark.asyncio
    async def test_export_carries_saved_corrections(self, db_session):
        shift = await _completed_shift(db_session, date(2026, 3, 2))
        service = PayrollService(db_session)
        override = PayrollOverride(shift_id=shift.id, hours_worked=Decimal("3"), reason="Stayed for dinner prep")

        run = await service.run(date(2026, 3, 1), date(2026, 3, 7), overrides=[override], persist=True)
        report = await service.export(date(2026, 3, 1), date(2026, 3, 7))

        assert run.entries[0].total_pay == Decimal("66.00")
        lines = report.splitlines()
        assert lines[-2] == "Alice Martin,psw-1,3.00,1,0,0,66.00"
        assert lines[-1] == "TOTAL,,3.00,,,,66.00"

    @pytest.mark.asyncio
    async def test_export_settles_shifts_without_saved_entries(self, db_session):
        corrected = await _completed_shift(db_session, date(2026, 3, 2))
        await _completed_shift(db_session, date(2026, 3, 3), worker_id="psw-2", worker_name="Bob Singh")
        service = PayrollService(db_session)
        override = PayrollOverride(shift_id=corrected.id, overtime_minutes=20, reason="Approved late finish")
        await service.run(date(2026, 3, 2), date(2026, 3, 2), overrides=[override], persist=True)

        report = await service.export(date(2026, 3, 1), date(2026, 3, 7))

        # 44.00 + 20 min at 22 x 1.5 (11.00) for Alice, 44.00 for Bob
        assert report.splitlines()[-1] == "TOTAL,,4.00,,,,99.00"
