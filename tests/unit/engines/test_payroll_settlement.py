"""
Payroll Settlement Engine Unit Tests

Tests for entry derivation, rate policy, admin overrides and grouping.
"""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import uuid4

import pytest

from engines.schemas.payroll import PayRates, PayrollOverride, RatePolicy
from engines.schemas.pricing import TaskCategory
from engines.schemas.shift import Shift, ShiftStatus
from engines.services.payroll_settlement import (
    classify_services,
    group_by_date,
    group_by_worker,
    settle,
    settle_shift,
)


def _shift(
    worker_id: str = "psw-1",
    worker_name: str = "Alice",
    day: date = date(2026, 3, 2),
    hours: int = 3,
    category: TaskCategory | None = TaskCategory.STANDARD,
    overtime_minutes: int = 0,
    pay_rate_snapshot: Decimal | None = None,
    status: ShiftStatus = ShiftStatus.COMPLETED,
    services: list[str] | None = None,
) -> Shift:
    checked_in = datetime.combine(day, time(9, 0))
    completed = status == ShiftStatus.COMPLETED
    return Shift(
        id=uuid4(),
        booking_id=uuid4(),
        worker_id=worker_id,
        worker_name=worker_name,
        services=services or ["Personal Care"],
        category=category,
        scheduled_date=day,
        scheduled_start=time(9, 0),
        scheduled_end=time(9 + hours, 0),
        claimed_at=checked_in,
        checked_in_at=checked_in,
        signed_out_at=datetime.combine(day, time(9 + hours, 0)) if completed else None,
        overtime_minutes=overtime_minutes,
        pay_rate_snapshot=pay_rate_snapshot,
        status=status,
    )


class TestSettleShift:
    """Single shift to payroll entry."""

    def test_standard_shift(self):
        """3h standard at $22 -> $66.00, no overtime."""
        entry = settle_shift(_shift(), PayRates())

        assert entry.hours_worked == Decimal("3.00")
        assert entry.pay_rate == Decimal("22.00")
        assert entry.base_pay == Decimal("66.00")
        assert entry.overtime_pay == Decimal("0.00")
        assert entry.total_pay == Decimal("66.00")

    def test_overtime_paid_at_time_and_a_half(self):
        """30 min overtime at $22 -> 0.5 x 22 x 1.5 = $16.50."""
        entry = settle_shift(_shift(overtime_minutes=30), PayRates())

        assert entry.overtime_pay == Decimal("16.50")
        assert entry.total_pay == Decimal("82.50")

    def test_base_pay_uses_reported_hours(self):
        """1h05m reports 1.08h; base pay is 1.08 x 22 = $23.76, not 23.83."""
        shift = _shift(hours=1)
        shift.signed_out_at = datetime.combine(shift.scheduled_date, time(10, 5))

        entry = settle_shift(shift, PayRates())

        assert entry.hours_worked == Decimal("1.08")
        assert entry.base_pay == Decimal("23.76")
        assert entry.base_pay == entry.hours_worked * entry.pay_rate

    @pytest.mark.parametrize(
        "category,rate",
        [
            (TaskCategory.STANDARD, Decimal("22.00")),
            (TaskCategory.HOSPITAL, Decimal("28.00")),
            (TaskCategory.DOCTOR, Decimal("25.00")),
        ],
    )
    def test_category_rates(self, category, rate):
        entry = settle_shift(_shift(category=category, hours=1), PayRates())

        assert entry.shift_category == category
        assert entry.pay_rate == rate

    def test_legacy_shift_classified_from_services(self):
        entry = settle_shift(
            _shift(category=None, services=["Hospital Pick-up/Drop-off (Discharge)"]),
            PayRates(),
        )

        assert entry.shift_category == TaskCategory.HOSPITAL

    def test_rejects_incomplete_shift(self):
        with pytest.raises(ValueError, match="not completed"):
            settle_shift(_shift(status=ShiftStatus.CHECKED_IN), PayRates())


class TestRatePolicy:
    """Snapshot vs live pay rates."""

    def test_snapshot_rate_survives_rate_change(self):
        shift = _shift(pay_rate_snapshot=Decimal("22.00"))
        raised = PayRates(standard=Decimal("30.00"))

        entry = settle_shift(shift, raised, RatePolicy.SNAPSHOT)

        assert entry.pay_rate == Decimal("22.00")
        assert entry.rate_source == RatePolicy.SNAPSHOT

    def test_live_policy_uses_current_rates(self):
        shift = _shift(pay_rate_snapshot=Decimal("22.00"))
        raised = PayRates(standard=Decimal("30.00"))

        entry = settle_shift(shift, raised, RatePolicy.LIVE)

        assert entry.pay_rate == Decimal("30.00")
        assert entry.rate_source == RatePolicy.LIVE

    def test_snapshot_falls_back_to_live_without_stored_rate(self):
        entry = settle_shift(_shift(pay_rate_snapshot=None), PayRates(), RatePolicy.SNAPSHOT)

        assert entry.pay_rate == Decimal("22.00")
        assert entry.rate_source == RatePolicy.LIVE


class TestOverrides:
    """Admin corrections at settlement time."""

    def test_override_replaces_hours_and_overtime(self):
        shift = _shift(overtime_minutes=45)
        override = PayrollOverride(
            shift_id=shift.id,
            hours_worked=Decimal("2.5"),
            overtime_minutes=0,
            reason="Worker forgot to sign out",
        )

        [entry] = settle([shift], PayRates(), overrides=[override])

        assert entry.hours_worked == Decimal("2.50")
        assert entry.overtime_minutes == 0
        assert entry.base_pay == Decimal("55.00")
        assert entry.adjusted is True

    def test_override_does_not_mutate_shift(self):
        shift = _shift(overtime_minutes=45)
        override = PayrollOverride(shift_id=shift.id, overtime_minutes=10, reason="Corrected")

        settle([shift], PayRates(), overrides=[override])

        assert shift.overtime_minutes == 45


class TestSettle:
    """Batch settlement."""

    def test_skips_incomplete_shifts(self):
        shifts = [_shift(), _shift(status=ShiftStatus.CLAIMED)]

        entries = settle(shifts, PayRates())

        assert len(entries) == 1

    def test_deterministic_ordering(self):
        shifts = [
            _shift(worker_id="psw-2", day=date(2026, 3, 3)),
            _shift(worker_id="psw-1", day=date(2026, 3, 3)),
            _shift(worker_id="psw-1", day=date(2026, 3, 2)),
        ]

        first = settle(shifts, PayRates())
        second = settle(list(reversed(shifts)), PayRates())

        assert first == second
        assert [(e.date, e.worker_id) for e in first] == [
            (date(2026, 3, 2), "psw-1"),
            (date(2026, 3, 3), "psw-1"),
            (date(2026, 3, 3), "psw-2"),
        ]


class TestGrouping:
    """Daily and per-worker reductions."""

    def test_group_by_date_most_recent_first(self):
        entries = settle(
            [
                _shift(day=date(2026, 3, 2)),
                _shift(day=date(2026, 3, 4), category=TaskCategory.HOSPITAL),
                _shift(day=date(2026, 3, 4), worker_id="psw-2", worker_name="Bob"),
            ],
            PayRates(),
        )

        days = group_by_date(entries)

        assert [d.date for d in days] == [date(2026, 3, 4), date(2026, 3, 2)]
        assert days[0].total_shifts == 2
        assert days[0].shifts_by_category[TaskCategory.HOSPITAL] == 1
        assert days[0].shifts_by_category[TaskCategory.STANDARD] == 1
        # 3h x $28 + 3h x $22
        assert days[0].total_owed == Decimal("150.00")

    def test_group_by_worker_sorted_by_name(self):
        entries = settle(
            [
                _shift(worker_id="psw-9", worker_name="Zoe"),
                _shift(worker_id="psw-1", worker_name="Alice", category=TaskCategory.DOCTOR),
                _shift(worker_id="psw-1", worker_name="Alice", day=date(2026, 3, 3)),
            ],
            PayRates(),
        )

        workers = group_by_worker(entries)

        assert [w.worker_name for w in workers] == ["Alice", "Zoe"]
        alice = workers[0]
        assert alice.shift_count == 2
        assert alice.total_hours == Decimal("6.00")
        assert alice.doctor_shifts == 1
        assert alice.standard_shifts == 1
        assert alice.total_pay == Decimal("141.00")

    def test_empty_input(self):
        assert group_by_date([]) == []
        assert group_by_worker([]) == []


class TestClassifyServices:
    """Keyword fallback for shifts without a stored category."""

    @pytest.mark.parametrize(
        "services,expected",
        [
            (["Doctor Appointment Escort"], TaskCategory.DOCTOR),
            (["Hospital Pick-up/Drop-off (Discharge)", "Doctor Appointment Escort"], TaskCategory.HOSPITAL),
            (["Meal Preparation"], TaskCategory.STANDARD),
            ([], TaskCategory.STANDARD),
        ],
    )
    def test_classification(self, services, expected):
        assert classify_services(services) == expected
