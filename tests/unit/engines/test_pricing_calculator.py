"""
Pricing Calculator Unit Tests

Tests for booking quotes: base block, HST, surge, minimum fee and
category priority. Figures follow the portal's published rate card.
"""

from decimal import Decimal

import pytest

from engines.schemas.pricing import PricingConfig, TaskCategory, TaskDefinition
from engines.services.pricing_calculator import ONTARIO_HST_RATE, price
from engines.services.task_catalog import TaskCatalog


def _config(**overrides) -> PricingConfig:
    return PricingConfig(**overrides)


class TestPricingScenarios:
    """Reference bookings."""

    def test_personal_care_no_surge(self):
        """Personal care alone: 45 min floored to 1h at $35 -> $35.00 + $4.55 HST = $39.55."""
        quote = price(_config(), TaskCatalog(), ["personal-care"])

        assert quote.base_minutes == 60
        assert quote.base_cost == Decimal("35.00")
        assert quote.base_charge == Decimal("35.00")
        assert quote.hst_amount == Decimal("4.55")
        assert quote.subtotal == Decimal("39.55")
        assert quote.surge_amount == Decimal("0.00")
        assert quote.total == Decimal("39.55")
        assert quote.is_minimum_fee_applied is False

    def test_personal_care_asap(self):
        """Same booking at the ASAP floor of 1.25: surge $9.89, total $49.44."""
        quote = price(_config(), TaskCatalog(), ["personal-care"], surge_multiplier=Decimal("1.25"))

        assert quote.surge_amount == Decimal("9.89")
        assert quote.total == Decimal("49.44")
        assert quote.surge_multiplier == Decimal("1.25")

    def test_total_is_sum_of_components(self):
        """Without the minimum fee, total == base_charge + hst_amount + surge_amount."""
        quote = price(_config(), TaskCatalog(), ["meal-prep", "companionship", "respite"], surge_multiplier=1.5)

        assert quote.is_minimum_fee_applied is False
        assert quote.total == quote.base_charge + quote.hst_amount + quote.surge_amount
        assert quote.minimum_fee_adjustment == Decimal("0.00")


class TestMinimumFee:
    """Minimum booking fee floor."""

    def test_short_explicit_duration_raised_to_minimum(self):
        """15 minutes at $35 totals $9.89, below the $25 floor."""
        quote = price(_config(), TaskCatalog(), ["medication"], explicit_duration_hours=Decimal("0.25"))

        assert quote.base_minutes == 15
        assert quote.base_charge == Decimal("8.75")
        assert quote.total == Decimal("25.00")
        assert quote.is_minimum_fee_applied is True

    def test_components_not_rewritten_when_floor_applies(self):
        """The breakdown keeps its computed values; only total is raised."""
        quote = price(_config(), TaskCatalog(), ["medication"], explicit_duration_hours=Decimal("0.25"))

        assert quote.base_charge + quote.hst_amount + quote.surge_amount < quote.total
        assert quote.minimum_fee_adjustment == quote.total - (quote.subtotal + quote.surge_amount)

    def test_zero_duration_is_priced_then_floored(self):
        quote = price(_config(), TaskCatalog(), ["personal-care"], explicit_duration_hours=0)

        assert quote.base_minutes == 0
        assert quote.base_charge == Decimal("0.00")
        assert quote.total == Decimal("25.00")
        assert quote.is_minimum_fee_applied is True

    @pytest.mark.parametrize("fee", [Decimal("40.00"), Decimal("100.00")])
    def test_total_never_below_configured_fee(self, fee):
        quote = price(_config(minimum_booking_fee=fee), TaskCatalog(), ["personal-care"])

        assert quote.total >= fee
        assert quote.is_minimum_fee_applied is True


class TestCategoryPriority:
    """Highest-priority category prices the whole block."""

    def test_hospital_beats_doctor_and_standard(self):
        quote = price(_config(), TaskCatalog(), ["personal-care", "doctor-escort", "hospital-visit"])

        assert quote.category == TaskCategory.HOSPITAL
        assert quote.base_cost == Decimal("75.00")
        # 45 + 60 + 90 = 195 minutes at $75/hr
        assert quote.base_minutes == 195
        assert quote.base_charge == Decimal("243.75")

    def test_doctor_beats_standard(self):
        quote = price(_config(), TaskCatalog(), ["meal-prep", "doctor-escort"])

        assert quote.category == TaskCategory.DOCTOR
        assert quote.base_cost == Decimal("55.00")

    def test_order_of_selection_does_not_matter(self):
        a = price(_config(), TaskCatalog(), ["doctor-escort", "meal-prep"])
        b = price(_config(), TaskCatalog(), ["meal-prep", "doctor-escort"])

        assert a == b


class TestEdgeCases:
    """Unpriceable and partially known input."""

    def test_empty_selection_returns_none(self):
        assert price(_config(), TaskCatalog(), []) is None

    def test_unknown_ids_contribute_nothing(self):
        quote = price(_config(), TaskCatalog(), ["personal-care", "does-not-exist"])

        assert quote.base_minutes == 60
        assert quote.category == TaskCategory.STANDARD

    def test_only_unknown_ids_priced_at_minimum_hours(self):
        quote = price(_config(), TaskCatalog(), ["does-not-exist"])

        assert quote.base_minutes == 60
        assert quote.base_cost == Decimal("35.00")

    def test_disabled_task_is_ignored(self):
        catalog = TaskCatalog([
            TaskDefinition(id="personal-care", name="Personal Care", included_minutes=45),
            TaskDefinition(
                id="hospital-visit",
                name="Hospital Visit",
                included_minutes=90,
                category=TaskCategory.HOSPITAL,
                is_active=False,
            ),
        ])

        quote = price(_config(), catalog, ["personal-care", "hospital-visit"])

        assert quote.category == TaskCategory.STANDARD
        assert quote.base_minutes == 60

    def test_explicit_duration_not_grown_to_match_tasks(self):
        """A chosen duration wins even when the tasks add up to more."""
        quote = price(_config(), TaskCatalog(), ["hospital-visit"], explicit_duration_hours=Decimal("1"))

        assert quote.base_minutes == 60
        assert quote.base_charge == Decimal("75.00")

    def test_task_duration_override(self):
        quote = price(
            _config(task_duration_overrides={"personal-care": 120}),
            TaskCatalog(),
            ["personal-care"],
        )

        assert quote.base_minutes == 120
        assert quote.base_charge == Decimal("70.00")

    def test_hst_rate_is_a_keyword_parameter(self):
        default = price(_config(), TaskCatalog(), ["personal-care"])
        zero = price(_config(), TaskCatalog(), ["personal-care"], hst_rate=Decimal("0"))

        assert ONTARIO_HST_RATE == Decimal("0.13")
        assert default.hst_amount == Decimal("4.55")
        assert zero.hst_amount == Decimal("0.00")
