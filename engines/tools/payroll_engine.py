"""
Payroll Engine MCP Tools

Settlement of completed shifts exposed as an MCP tool.
"""

from datetime import date

from engines.schemas.payroll import PayRates, RatePolicy
from engines.schemas.shift import Shift
from engines.services.payroll_settlement import group_by_worker, settle
from engines.services.settlement_export import export_settlement
from engines.tools.pricing_engine import mcp


@mcp.tool()
async def settle_shifts(
    shifts: list[dict],
    period_start: str,
    period_end: str,
    pay_rates: dict | None = None,
    rate_policy: str = RatePolicy.SNAPSHOT.value,
) -> dict:
    """
    Settle completed shifts into payroll entries.

    Args:
        shifts: Shift records (only completed shifts are settled)
        period_start: Report period start (YYYY-MM-DD)
        period_end: Report period end (YYYY-MM-DD)
        pay_rates: Hourly rates per category; defaults when omitted
        rate_policy: "snapshot" (rate stored at sign-out) or "live"

    Returns:
        Entries, per-worker totals and the CSV settlement report
    """
    rates = PayRates.model_validate(pay_rates or {})
    entries = settle(
        [Shift.model_validate(s) for s in shifts],
        rates,
        rate_policy=RatePolicy(rate_policy),
    )
    return {
        "entries": [e.model_dump(mode="json") for e in entries],
        "workers": [w.model_dump(mode="json") for w in group_by_worker(entries)],
        "report": export_settlement(
            entries,
            date.fromisoformat(period_start),
            date.fromisoformat(period_end),
        ),
    }
