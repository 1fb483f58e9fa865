"""
Pricing Engine Schemas

Task catalog entries, pricing configuration, surge rules and quotes.
"""

from datetime import date, time
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskCategory(str, Enum):
    """Price category of a billable task."""

    STANDARD = "standard"
    HOSPITAL = "hospital"
    DOCTOR = "doctor"


# Highest priority first: escort/medical visits price the whole block.
CATEGORY_PRIORITY: tuple[TaskCategory, ...] = (
    TaskCategory.HOSPITAL,
    TaskCategory.DOCTOR,
    TaskCategory.STANDARD,
)


def highest_priority_category(categories) -> TaskCategory:
    """Return the highest-priority category present, or STANDARD."""
    present = set(categories)
    for category in CATEGORY_PRIORITY:
        if category in present:
            return category
    return TaskCategory.STANDARD


class TaskDefinition(BaseModel):
    """
    A billable task type.

    Reference data edited by administrators. Tasks referenced by historical
    shifts are soft-disabled (``is_active=False``), never deleted.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Stable task identifier, e.g. 'personal-care'")
    name: str = Field(..., description="Display name shown to clients and workers")
    included_minutes: int = Field(..., ge=0, description="Minutes of care included for this task")
    category: TaskCategory = Field(default=TaskCategory.STANDARD)
    is_active: bool = Field(default=True)


class SurgeRule(BaseModel):
    """
    High-demand pricing window.

    Every constraint is optional; a rule with none of them is always active.
    ``days_of_week`` uses 0 = Sunday through 6 = Saturday.
    """

    id: str
    name: str
    enabled: bool = True
    multiplier: Decimal | None = Field(
        default=None,
        ge=1,
        description="Window multiplier; falls back to the global surge multiplier",
    )
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: list[int] = Field(default_factory=list)
    stackable: bool = False

    @field_validator("days_of_week")
    @classmethod
    def _valid_days(cls, value: list[int]) -> list[int]:
        for day in value:
            if day < 0 or day > 6:
                raise ValueError(f"day of week must be 0-6, got {day}")
        return sorted(set(value))


def _clamp(value, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def _default_rates() -> dict[TaskCategory, Decimal]:
    return {
        TaskCategory.STANDARD: Decimal("35.00"),
        TaskCategory.DOCTOR: Decimal("55.00"),
        TaskCategory.HOSPITAL: Decimal("75.00"),
    }


class PricingConfig(BaseModel):
    """
    Process-wide pricing configuration.

    Bounded overtime fields are clamped rather than rejected so that an
    out-of-range admin save still succeeds.
    """

    base_hourly_rates: dict[TaskCategory, Decimal] = Field(default_factory=_default_rates)
    surge_multiplier: Decimal = Field(default=Decimal("1.0"), ge=1)
    minimum_hours: Decimal = Field(default=Decimal("1"), ge=0)
    minimum_booking_fee: Decimal = Field(default=Decimal("25.00"), ge=0)
    overtime_rate_percentage: int = Field(
        default=50,
        description="Client overtime rate as a percentage of the hourly rate (10-100)",
    )
    overtime_grace_minutes: int = Field(
        default=15,
        description="Minutes past scheduled end before a shift is flagged (0-30)",
    )
    overtime_block_minutes: int = Field(
        default=30,
        description="Overtime is billed in blocks of this many minutes (15-60)",
    )
    task_duration_overrides: dict[str, int] = Field(default_factory=dict)
    surge_rules: list[SurgeRule] = Field(default_factory=list)

    @field_validator("overtime_rate_percentage", mode="before")
    @classmethod
    def _clamp_rate_percentage(cls, value):
        return _clamp(value, 10, 100)

    @field_validator("overtime_grace_minutes", mode="before")
    @classmethod
    def _clamp_grace(cls, value):
        return _clamp(value, 0, 30)

    @field_validator("overtime_block_minutes", mode="before")
    @classmethod
    def _clamp_block(cls, value):
        return _clamp(value, 15, 60)

    @field_validator("base_hourly_rates")
    @classmethod
    def _fill_missing_rates(cls, value: dict[TaskCategory, Decimal]) -> dict[TaskCategory, Decimal]:
        rates = _default_rates()
        rates.update(value)
        return rates

    def rate_for(self, category: TaskCategory) -> Decimal:
        return self.base_hourly_rates[category]

    def minutes_for(self, task: TaskDefinition) -> int:
        return self.task_duration_overrides.get(task.id, task.included_minutes)


class Quote(BaseModel):
    """
    Itemized booking quote.

    ``total`` equals ``base_charge + hst_amount + surge_amount`` unless the
    minimum booking fee applied, in which case only ``total`` was raised.
    """

    category: TaskCategory
    surge_multiplier: Decimal
    base_minutes: int = Field(..., ge=0)
    base_cost: Decimal = Field(..., description="Hourly rate applied to the whole block")
    base_charge: Decimal
    hst_amount: Decimal
    surge_amount: Decimal
    subtotal: Decimal = Field(..., description="base_charge + hst_amount")
    total: Decimal
    is_minimum_fee_applied: bool = False

    @property
    def minimum_fee_adjustment(self) -> Decimal:
        """Amount added by the minimum fee floor, for explicit display."""
        return self.total - (self.subtotal + self.surge_amount)
