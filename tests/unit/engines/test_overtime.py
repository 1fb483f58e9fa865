"""
Overtime Calculator Unit Tests

Tests for the sign-out overtime determination and the client overtime
charge in billing blocks.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from engines.schemas.pricing import PricingConfig
from engines.services.overtime import (
    calculate_overtime_charge,
    determine_overtime,
    scheduled_end_datetime,
)

END = datetime(2026, 3, 2, 12, 0)


class TestOvertimeDetermination:
    """Minutes past the scheduled end and the grace flag."""

    def test_fourteen_minutes_not_flagged(self):
        result = determine_overtime(END, END + timedelta(minutes=14), grace_minutes=15)

        assert result.overtime_minutes == 14
        assert result.flagged_for_overtime is False

    def test_fifteen_minutes_flagged(self):
        result = determine_overtime(END, END + timedelta(minutes=15), grace_minutes=15)

        assert result.overtime_minutes == 15
        assert result.flagged_for_overtime is True

    def test_partial_minutes_floored(self):
        result = determine_overtime(END, END + timedelta(minutes=14, seconds=59), grace_minutes=15)

        assert result.overtime_minutes == 14
        assert result.flagged_for_overtime is False

    def test_early_sign_out_is_zero(self):
        result = determine_overtime(END, END - timedelta(minutes=30), grace_minutes=15)

        assert result.overtime_minutes == 0
        assert result.flagged_for_overtime is False

    def test_zero_grace_flags_on_time_sign_out(self):
        """With no grace period the flag is set even at zero minutes."""
        result = determine_overtime(END, END, grace_minutes=0)

        assert result.flagged_for_overtime is True

    def test_audit_fields_recorded(self):
        signed_out = END + timedelta(minutes=20)
        result = determine_overtime(END, signed_out, grace_minutes=15)

        assert result.scheduled_end_at == END
        assert result.signed_out_at == signed_out
        assert result.grace_minutes == 15


class TestScheduledEnd:
    """Scheduled end as a datetime."""

    def test_same_day_window(self):
        assert scheduled_end_datetime(date(2026, 3, 2), time(9, 0), time(12, 0)) == datetime(2026, 3, 2, 12, 0)

    def test_overnight_window_rolls_to_next_day(self):
        end_at = scheduled_end_datetime(date(2026, 3, 2), time(22, 0), time(2, 0))

        assert end_at == datetime(2026, 3, 3, 2, 0)

    def test_overnight_sign_out_is_not_a_day_of_overtime(self):
        end_at = scheduled_end_datetime(date(2026, 3, 2), time(22, 0), time(2, 0))
        result = determine_overtime(end_at, datetime(2026, 3, 3, 2, 10), grace_minutes=15)

        assert result.overtime_minutes == 10


class TestOvertimeCharge:
    """Client overtime billing (defaults: 15 min grace, 30 min blocks, 50%)."""

    def test_within_grace_no_charge(self):
        charge = calculate_overtime_charge(14, Decimal("35.00"), PricingConfig())

        assert charge.within_grace_period is True
        assert charge.charge == Decimal("0.00")

    def test_one_block(self):
        """20 min -> 1 block of 30 min -> 0.5h x $35 x 50% = $8.75."""
        charge = calculate_overtime_charge(20, Decimal("35.00"), PricingConfig())

        assert charge.billable_blocks == 1
        assert charge.billable_minutes == 30
        assert charge.charge == Decimal("8.75")

    def test_partial_block_rounds_up(self):
        """31 min -> 2 blocks -> 1h x $35 x 50% = $17.50."""
        charge = calculate_overtime_charge(31, Decimal("35.00"), PricingConfig())

        assert charge.billable_blocks == 2
        assert charge.charge == Decimal("17.50")

    @pytest.mark.parametrize(
        "minutes,block,pct,expected",
        [
            (45, 15, 100, Decimal("56.25")),  # 3 blocks x 15 min at $75
            (60, 60, 10, Decimal("7.50")),  # 1 block x 60 min at 10% of $75
        ],
    )
    def test_configured_blocks_and_rate(self, minutes, block, pct, expected):
        config = PricingConfig(overtime_block_minutes=block, overtime_rate_percentage=pct)

        assert calculate_overtime_charge(minutes, Decimal("75.00"), config).charge == expected
