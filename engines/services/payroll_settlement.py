"""
Payroll Settlement Engine

Converts completed shifts into payroll entries and reduces them into
daily and per-worker summaries.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from engines.schemas.payroll import (
    DailyPayrollSummary,
    PayRates,
    PayrollEntry,
    PayrollOverride,
    RatePolicy,
    WorkerPayrollSummary,
)
from engines.schemas.pricing import TaskCategory
from engines.schemas.shift import Shift, ShiftStatus

logger = logging.getLogger(__name__)

# Staff overtime is paid at time-and-a-half.
OVERTIME_PAY_MULTIPLIER = Decimal("1.5")

HOSPITAL_KEYWORDS = ("hospital", "discharge", "pick-up")
DOCTOR_KEYWORDS = ("doctor", "appointment", "escort")

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def classify_services(services: Iterable[str]) -> TaskCategory:
    """
    Best-effort category from free-text service labels.

    Only used for shifts created before the category was stored on the shift.
    """
    labels = [s.lower() for s in services]
    if any(k in label for label in labels for k in HOSPITAL_KEYWORDS):
        return TaskCategory.HOSPITAL
    if any(k in label for label in labels for k in DOCTOR_KEYWORDS):
        return TaskCategory.DOCTOR
    return TaskCategory.STANDARD


def shift_category(shift: Shift) -> TaskCategory:
    return shift.category or classify_services(shift.services)


def _pay_rate(shift: Shift, category: TaskCategory, pay_rates: PayRates, policy: RatePolicy) -> tuple[Decimal, RatePolicy]:
    if policy == RatePolicy.SNAPSHOT and shift.pay_rate_snapshot is not None:
        return shift.pay_rate_snapshot, RatePolicy.SNAPSHOT
    if policy == RatePolicy.SNAPSHOT:
        logger.info(f"Shift {shift.id} has no pay rate snapshot; using live {category.value} rate")
    return pay_rates.for_category(category), RatePolicy.LIVE


def settle_shift(
    shift: Shift,
    pay_rates: PayRates,
    rate_policy: RatePolicy = RatePolicy.SNAPSHOT,
    override: PayrollOverride | None = None,
) -> PayrollEntry:
    """
    Build the payroll entry for one completed shift.

    Hours are measured check-in to sign-out (actual time); overtime minutes
    were measured against the scheduled end at sign-out.
    """
    if shift.status != ShiftStatus.COMPLETED or shift.checked_in_at is None or shift.signed_out_at is None:
        raise ValueError(f"Shift {shift.id} is not completed")

    category = shift_category(shift)
    pay_rate, rate_source = _pay_rate(shift, category, pay_rates, rate_policy)

    worked_seconds = max(0.0, (shift.signed_out_at - shift.checked_in_at).total_seconds())
    hours_worked = Decimal(str(worked_seconds)) / Decimal(3600)
    overtime_minutes = shift.overtime_minutes

    if override is not None:
        if override.hours_worked is not None:
            hours_worked = override.hours_worked
        if override.overtime_minutes is not None:
            overtime_minutes = override.overtime_minutes
        logger.info(f"Applying payroll override to shift {shift.id}: {override.reason}")

    # base_pay == hours_worked * pay_rate on the reported (cent) hours
    hours_worked = _money(hours_worked)
    base_pay = _money(hours_worked * pay_rate)
    overtime_pay = _money(Decimal(overtime_minutes) / Decimal(60) * pay_rate * OVERTIME_PAY_MULTIPLIER)

    return PayrollEntry(
        worker_id=shift.worker_id or "",
        worker_name=shift.worker_name or "Unknown",
        shift_id=shift.id,
        date=shift.scheduled_date,
        hours_worked=hours_worked,
        overtime_minutes=overtime_minutes,
        shift_category=category,
        pay_rate=pay_rate,
        base_pay=base_pay,
        overtime_pay=overtime_pay,
        total_pay=base_pay + overtime_pay,
        rate_source=rate_source,
        adjusted=override is not None,
    )


def settle(
    shifts: Iterable[Shift],
    pay_rates: PayRates,
    rate_policy: RatePolicy = RatePolicy.SNAPSHOT,
    overrides: Sequence[PayrollOverride] | None = None,
) -> list[PayrollEntry]:
    """
    Settle completed shifts into payroll entries.

    Shifts that are not completed are skipped. Output is ordered by
    (date, worker, shift) so identical input yields identical output.
    """
    override_map: dict[UUID, PayrollOverride] = {o.shift_id: o for o in overrides or ()}

    entries = []
    skipped = 0
    for shift in shifts:
        if shift.status != ShiftStatus.COMPLETED or shift.checked_in_at is None or shift.signed_out_at is None:
            skipped += 1
            continue
        entries.append(settle_shift(shift, pay_rates, rate_policy, override_map.get(shift.id)))

    if skipped:
        logger.debug(f"Skipped {skipped} shifts that are not completed")

    entries.sort(key=lambda e: (e.date, e.worker_id, str(e.shift_id)))
    return entries


def _category_counts(entries: Iterable[PayrollEntry]) -> dict[TaskCategory, int]:
    counts = {category: 0 for category in TaskCategory}
    for entry in entries:
        counts[entry.shift_category] += 1
    return counts


def group_by_date(entries: Sequence[PayrollEntry]) -> list[DailyPayrollSummary]:
    """Daily summaries, most recent day first."""
    grouped: dict = {}
    for entry in entries:
        grouped.setdefault(entry.date, []).append(entry)

    return [
        DailyPayrollSummary(
            date=day,
            total_shifts=len(day_entries),
            total_hours=sum((e.hours_worked for e in day_entries), Decimal("0")),
            total_owed=sum((e.total_pay for e in day_entries), Decimal("0")),
            shifts_by_category=_category_counts(day_entries),
            entries=day_entries,
        )
        for day, day_entries in sorted(grouped.items(), key=lambda item: item[0], reverse=True)
    ]


def group_by_worker(entries: Sequence[PayrollEntry]) -> list[WorkerPayrollSummary]:
    """Per-worker summaries ordered by worker name, then id."""
    grouped: dict[str, list[PayrollEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.worker_id, []).append(entry)

    summaries = []
    for worker_id, worker_entries in grouped.items():
        counts = _category_counts(worker_entries)
        summaries.append(
            WorkerPayrollSummary(
                worker_id=worker_id,
                worker_name=worker_entries[0].worker_name,
                total_hours=sum((e.hours_worked for e in worker_entries), Decimal("0")),
                total_pay=sum((e.total_pay for e in worker_entries), Decimal("0")),
                shift_count=len(worker_entries),
                standard_shifts=counts[TaskCategory.STANDARD],
                hospital_shifts=counts[TaskCategory.HOSPITAL],
                doctor_shifts=counts[TaskCategory.DOCTOR],
            )
        )

    summaries.sort(key=lambda s: (s.worker_name, s.worker_id))
    return summaries
