"""
Pricing Engine MCP Tools

Surge evaluation and booking quotes exposed as MCP tools.
"""

from datetime import date, time

from fastmcp import FastMCP

from engines.schemas.pricing import PricingConfig
from engines.services.pricing_calculator import price
from engines.services.surge_evaluator import evaluate_surge, find_active_rules
from engines.services.task_catalog import TaskCatalog

# Initialize MCP server (will be started from server.py)
mcp = FastMCP("PSW Direct Pricing Engine")


def _parse_slot(booking_date: str | None, booking_time: str | None) -> tuple[date | None, time | None]:
    parsed_date = date.fromisoformat(booking_date) if booking_date else None
    parsed_time = time.fromisoformat(booking_time) if booking_time else None
    return parsed_date, parsed_time


@mcp.tool()
async def evaluate_surge_multiplier(
    booking_date: str | None = None,
    booking_time: str | None = None,
    is_asap: bool = False,
    pricing_config: dict | None = None,
) -> dict:
    """
    Evaluate the surge multiplier for a booking slot.

    Args:
        booking_date: Service date (YYYY-MM-DD), optional for ASAP requests
        booking_time: Start time (HH:MM), optional for ASAP requests
        is_asap: Immediate-service request (multiplier floor of 1.25)
        pricing_config: Pricing configuration snapshot; defaults when omitted

    Returns:
        Dictionary with the multiplier and the names of the matching rules
    """
    config = PricingConfig.model_validate(pricing_config or {})
    slot_date, slot_time = _parse_slot(booking_date, booking_time)

    multiplier = evaluate_surge(config, slot_date, slot_time, is_asap)
    return {
        "multiplier": float(multiplier),
        "active_rules": [r.name for r in find_active_rules(config, slot_date, slot_time)],
        "is_asap": is_asap,
    }


@mcp.tool()
async def quote_booking(
    task_ids: list[str],
    booking_date: str | None = None,
    booking_time: str | None = None,
    is_asap: bool = False,
    explicit_duration_hours: float | None = None,
    pricing_config: dict | None = None,
) -> dict:
    """
    Price a booking from selected task ids and timing.

    Args:
        task_ids: Selected task identifiers (e.g. ["personal-care", "meal-prep"])
        booking_date: Service date (YYYY-MM-DD)
        booking_time: Start time (HH:MM)
        is_asap: Immediate-service request
        explicit_duration_hours: Caller-chosen duration; replaces task minutes
        pricing_config: Pricing configuration snapshot; defaults when omitted

    Returns:
        Itemized quote, or {"quote": None} when no task is selected

    Example:
        Personal care alone at $35/hr, no surge:
        - base charge $35.00, HST $4.55, total $39.55
        - same booking as ASAP: surge $9.89, total $49.44
    """
    config = PricingConfig.model_validate(pricing_config or {})
    slot_date, slot_time = _parse_slot(booking_date, booking_time)

    multiplier = evaluate_surge(config, slot_date, slot_time, is_asap)
    quote = price(
        config,
        TaskCatalog(),
        task_ids,
        surge_multiplier=multiplier,
        explicit_duration_hours=explicit_duration_hours,
    )
    if quote is None:
        return {"quote": None}
    return {"quote": quote.model_dump(mode="json")}
