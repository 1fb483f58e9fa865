"""
Settlement Export

Flat CSV report of a settlement run with a trailing TOTAL row.
"""

import csv
import io
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from engines.schemas.payroll import PayrollEntry
from engines.services.payroll_settlement import group_by_worker

WORKER_HEADER = [
    "Worker Name",
    "Worker ID",
    "Total Hours",
    "Standard Shifts",
    "Hospital Shifts",
    "Doctor Shifts",
    "Total Pay Owed",
]

ENTRY_HEADER = [
    "Date",
    "Worker ID",
    "Worker Name",
    "Shift ID",
    "Category",
    "Hours Worked",
    "Overtime Minutes",
    "Pay Rate",
    "Base Pay",
    "Overtime Pay",
    "Total Pay",
]


def _fmt(value: Decimal) -> str:
    return f"{value:.2f}"


def export_settlement(
    entries: Sequence[PayrollEntry],
    period_start: date,
    period_end: date,
    by_worker: bool = True,
) -> str:
    """
    Render entries dated within [period_start, period_end] as CSV.

    Rows are sorted so the same input always renders the same text.
    """
    in_range = [e for e in entries if period_start <= e.date <= period_end]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([f"Payroll Export: {period_start.isoformat()} to {period_end.isoformat()}"])
    writer.writerow([])

    total_hours = sum((e.hours_worked for e in in_range), Decimal("0"))
    total_pay = sum((e.total_pay for e in in_range), Decimal("0"))

    if by_worker:
        writer.writerow(WORKER_HEADER)
        for summary in group_by_worker(in_range):
            writer.writerow([
                summary.worker_name,
                summary.worker_id,
                _fmt(summary.total_hours),
                summary.standard_shifts,
                summary.hospital_shifts,
                summary.doctor_shifts,
                _fmt(summary.total_pay),
            ])
        writer.writerow(["TOTAL", "", _fmt(total_hours), "", "", "", _fmt(total_pay)])
    else:
        writer.writerow(ENTRY_HEADER)
        for entry in sorted(in_range, key=lambda e: (e.date, e.worker_id, str(e.shift_id))):
            writer.writerow([
                entry.date.isoformat(),
                entry.worker_id,
                entry.worker_name,
                str(entry.shift_id),
                entry.shift_category.value,
                _fmt(entry.hours_worked),
                entry.overtime_minutes,
                _fmt(entry.pay_rate),
                _fmt(entry.base_pay),
                _fmt(entry.overtime_pay),
                _fmt(entry.total_pay),
            ])
        writer.writerow(["TOTAL", "", "", "", "", _fmt(total_hours), "", "", "", "", _fmt(total_pay)])

    return buffer.getvalue()
