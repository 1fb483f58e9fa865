"""
Surge Rule Evaluator

Pure lookup of the demand multiplier for a booking slot.
"""

from datetime import date, time
from decimal import Decimal

from engines.schemas.pricing import PricingConfig, SurgeRule

# ASAP requests never price below this multiplier.
ASAP_SURGE_FLOOR = Decimal("1.25")


def _sunday_based_weekday(day: date) -> int:
    # date.weekday() is Monday=0; rules store Sunday=0.
    return (day.weekday() + 1) % 7


def _time_in_window(slot: time, start: time, end: time) -> bool:
    if start <= end:
        return start <= slot <= end
    # Window wraps past midnight, e.g. 22:00-06:00.
    return slot >= start or slot <= end


def is_rule_active(
    rule: SurgeRule,
    booking_date: date | None,
    booking_time: time | None,
) -> bool:
    """
    Check a rule against a booking slot.

    A constrained rule never matches when the input its constraint needs is
    missing.
    """
    if not rule.enabled:
        return False

    if rule.start_date or rule.end_date:
        if booking_date is None:
            return False
        if rule.start_date and booking_date < rule.start_date:
            return False
        if rule.end_date and booking_date > rule.end_date:
            return False

    if rule.start_time and rule.end_time:
        if booking_time is None:
            return False
        if not _time_in_window(booking_time, rule.start_time, rule.end_time):
            return False

    if rule.days_of_week:
        if booking_date is None:
            return False
        if _sunday_based_weekday(booking_date) not in rule.days_of_week:
            return False

    return True


def find_active_rules(
    config: PricingConfig,
    booking_date: date | None,
    booking_time: time | None,
) -> list[SurgeRule]:
    return [r for r in config.surge_rules if is_rule_active(r, booking_date, booking_time)]


def evaluate_surge(
    config: PricingConfig,
    booking_date: date | None = None,
    booking_time: time | None = None,
    is_asap: bool = False,
) -> Decimal:
    """
    Return the surge multiplier (>= 1.0) for a booking slot.

    Stackable rules multiply together; the highest non-stackable rule wins
    when it beats the stacked product. ASAP applies a floor of 1.25 and never
    lowers a higher window.
    """
    active = find_active_rules(config, booking_date, booking_time)

    multiplier = Decimal("1")
    stackable = [r for r in active if r.stackable]
    non_stackable = [r for r in active if not r.stackable]

    for rule in stackable:
        multiplier *= rule.multiplier or config.surge_multiplier

    if non_stackable:
        highest = max(r.multiplier or config.surge_multiplier for r in non_stackable)
        multiplier = max(multiplier, highest)

    multiplier = max(multiplier, Decimal("1"))
    if is_asap:
        multiplier = max(multiplier, ASAP_SURGE_FLOOR)
    return multiplier
