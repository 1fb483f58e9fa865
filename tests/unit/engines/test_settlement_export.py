"""
Settlement Export Unit Tests
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from engines.schemas.payroll import PayrollEntry
from engines.schemas.pricing import TaskCategory
from engines.services.settlement_export import ENTRY_HEADER, WORKER_HEADER, export_settlement


def _entry(worker_id: str, worker_name: str, day: date, total: str, category=TaskCategory.STANDARD, n: int = 1):
    return PayrollEntry(
        worker_id=worker_id,
        worker_name=worker_name,
        shift_id=UUID(int=n),
        date=day,
        hours_worked=Decimal("2.00"),
        shift_category=category,
        pay_rate=Decimal("22.00"),
        base_pay=Decimal(total),
        overtime_pay=Decimal("0.00"),
        total_pay=Decimal(total),
    )


ENTRIES = [
    _entry("psw-2", "Bob", date(2026, 3, 3), "44.00", n=1),
    _entry("psw-1", "Alice", date(2026, 3, 2), "56.00", category=TaskCategory.HOSPITAL, n=2),
    _entry("psw-1", "Alice", date(2026, 3, 9), "44.00", n=3),
]


class TestWorkerExport:
    """Per-worker CSV."""

    def test_layout(self):
        lines = export_settlement(ENTRIES, date(2026, 3, 1), date(2026, 3, 7)).splitlines()

        assert lines[0] == "Payroll Export: 2026-03-01 to 2026-03-07"
        assert lines[1] == ""
        assert lines[2] == ",".join(WORKER_HEADER)
        assert lines[3] == "Alice,psw-1,2.00,0,1,0,56.00"
        assert lines[4] == "Bob,psw-2,2.00,1,0,0,44.00"
        assert lines[5] == "TOTAL,,4.00,,,,100.00"

    def test_entries_outside_period_excluded(self):
        text = export_settlement(ENTRIES, date(2026, 3, 8), date(2026, 3, 14))

        assert "Bob" not in text
        assert text.splitlines()[-1] == "TOTAL,,2.00,,,,44.00"

    def test_empty_period_still_has_total(self):
        lines = export_settlement(ENTRIES, date(2027, 1, 1), date(2027, 1, 7)).splitlines()

        assert lines[-1] == "TOTAL,,0.00,,,,0.00"

    def test_deterministic(self):
        a = export_settlement(ENTRIES, date(2026, 3, 1), date(2026, 3, 31))
        b = export_settlement(list(reversed(ENTRIES)), date(2026, 3, 1), date(2026, 3, 31))

        assert a == b


class TestEntryExport:
    """Per-shift CSV."""

    def test_rows_sorted_by_date(self):
        lines = export_settlement(ENTRIES, date(2026, 3, 1), date(2026, 3, 31), by_worker=False).splitlines()

        assert lines[2] == ",".join(ENTRY_HEADER)
        assert lines[3].startswith("2026-03-02,psw-1,Alice,")
        assert ",hospital," in lines[3]
        assert lines[4].startswith("2026-03-03,psw-2,Bob,")
        assert lines[5].startswith("2026-03-09,psw-1,Alice,")
        assert lines[6] == "TOTAL,,,,,6.00,,,,,144.00"
