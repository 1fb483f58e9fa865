"""
Payroll Pydantic Schemas

API request/response models for settlement runs.
"""

from datetime import date

from pydantic import BaseModel, Field, model_validator

from engines.schemas.payroll import PayrollOverride


class SettlementRequest(BaseModel):
    """Settle completed shifts in a date range."""

    period_start: date
    period_end: date
    worker_id: str | None = None
    overrides: list[PayrollOverride] = Field(default_factory=list)
    persist: bool = Field(
        default=False,
        description="Store entries, replacing earlier entries for the same shifts",
    )

    @model_validator(mode="after")
    def _ordered_period(self) -> "SettlementRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self
