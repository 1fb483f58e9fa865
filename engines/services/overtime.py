"""
Overtime Calculator

Sign-out overtime determination against the scheduled end, and the
client-side overtime charge in billing blocks.
"""

import math
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel

from engines.schemas.pricing import PricingConfig


class OvertimeDetermination(BaseModel):
    """Auditable result of a sign-out."""

    scheduled_end_at: datetime
    signed_out_at: datetime
    overtime_minutes: int
    grace_minutes: int
    flagged_for_overtime: bool


class OvertimeCharge(BaseModel):
    """Client overtime charge computed from a determination."""

    overtime_minutes: int
    within_grace_period: bool
    billable_blocks: int
    billable_minutes: int
    charge: Decimal


def scheduled_end_datetime(scheduled_date: date, scheduled_start: time, scheduled_end: time) -> datetime:
    """Scheduled end as a datetime; windows ending at or before their start end next day."""
    end_at = datetime.combine(scheduled_date, scheduled_end)
    if scheduled_end <= scheduled_start:
        end_at += timedelta(days=1)
    return end_at


def determine_overtime(
    scheduled_end_at: datetime,
    signed_out_at: datetime,
    grace_minutes: int,
) -> OvertimeDetermination:
    """
    Whole minutes past the scheduled end, floored, never negative.

    The flag is binary at the grace threshold (inclusive); rounding into
    billing blocks happens separately.
    """
    elapsed_seconds = (signed_out_at - scheduled_end_at).total_seconds()
    overtime_minutes = max(0, math.floor(elapsed_seconds / 60))
    return OvertimeDetermination(
        scheduled_end_at=scheduled_end_at,
        signed_out_at=signed_out_at,
        overtime_minutes=overtime_minutes,
        grace_minutes=grace_minutes,
        flagged_for_overtime=overtime_minutes >= grace_minutes,
    )


def calculate_overtime_charge(
    overtime_minutes: int,
    hourly_rate: Decimal,
    config: PricingConfig,
) -> OvertimeCharge:
    """
    Bill overtime in blocks of ``overtime_block_minutes`` at
    ``overtime_rate_percentage`` of the hourly rate.

    Example (defaults: 15 min grace, 30 min blocks, 50%):
        20 minutes over at $35/hr -> 1 block -> 0.5h x $35 x 50% = $8.75
    """
    if overtime_minutes < config.overtime_grace_minutes:
        return OvertimeCharge(
            overtime_minutes=overtime_minutes,
            within_grace_period=True,
            billable_blocks=0,
            billable_minutes=0,
            charge=Decimal("0.00"),
        )

    block = config.overtime_block_minutes
    blocks = math.ceil(overtime_minutes / block) if overtime_minutes > 0 else 0
    rate_fraction = Decimal(config.overtime_rate_percentage) / Decimal(100)
    charge = Decimal(blocks * block) / Decimal(60) * hourly_rate * rate_fraction

    return OvertimeCharge(
        overtime_minutes=overtime_minutes,
        within_grace_period=False,
        billable_blocks=blocks,
        billable_minutes=blocks * block,
        charge=charge.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
    )
