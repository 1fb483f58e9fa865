"""
Pricing Calculator

Pure booking-time pricing: base block, HST, surge and minimum fee.
Overtime is never priced here; it is billed after sign-out.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from engines.schemas.pricing import PricingConfig, Quote, highest_priority_category
from engines.services.task_catalog import TaskCatalog

# Ontario HST. Regional assumption, kept fixed until other provinces are served.
ONTARIO_HST_RATE = Decimal("0.13")

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _duration_minutes(hours: float | Decimal) -> int:
    minutes = (Decimal(str(hours)) * 60).to_integral_value(rounding=ROUND_HALF_UP)
    return max(0, int(minutes))


def price(
    config: PricingConfig,
    catalog: TaskCatalog,
    task_ids: Sequence[str],
    surge_multiplier: Decimal | float = Decimal("1"),
    explicit_duration_hours: Decimal | float | None = None,
    hst_rate: Decimal = ONTARIO_HST_RATE,
) -> Quote | None:
    """
    Price a booking.

    Algorithm:
    1. Resolve selected tasks (unknown or disabled ids contribute nothing)
    2. Base minutes = max(minimum hours, task minutes), or the caller's
       explicit duration unchanged
    3. Hourly rate of the highest-priority category covers the whole block
    4. HST on the base charge, then surge on base + HST
    5. Raise the total to the minimum booking fee if below it

    Returns None when no task is selected; an unpriced booking is a valid
    transient state.
    """
    if not task_ids:
        return None

    multiplier = Decimal(str(surge_multiplier))
    tasks = catalog.resolve(task_ids)

    if explicit_duration_hours is not None:
        base_minutes = _duration_minutes(explicit_duration_hours)
    else:
        task_minutes = sum(config.minutes_for(t) for t in tasks)
        base_minutes = max(_duration_minutes(config.minimum_hours), task_minutes)

    category = highest_priority_category(t.category for t in tasks)
    base_cost = config.rate_for(category)

    base_charge = _money(base_cost * Decimal(base_minutes) / Decimal(60))
    hst_amount = _money(base_charge * hst_rate)
    subtotal = base_charge + hst_amount
    surge_amount = _money(subtotal * (multiplier - 1)) if multiplier != 1 else Decimal("0.00")
    total = subtotal + surge_amount

    is_minimum_fee_applied = False
    if total < config.minimum_booking_fee:
        total = _money(config.minimum_booking_fee)
        is_minimum_fee_applied = True

    return Quote(
        category=category,
        surge_multiplier=multiplier,
        base_minutes=base_minutes,
        base_cost=_money(base_cost),
        base_charge=base_charge,
        hst_amount=hst_amount,
        surge_amount=surge_amount,
        subtotal=subtotal,
        total=total,
        is_minimum_fee_applied=is_minimum_fee_applied,
    )
