"""Tests for single-project analytics."""

import pytest

from token_emissions.calculator.aggregator import Aggregator
from token_emissions.calculator.analytics import (
    AnalyticsDeriver,
    calc_circulation_ratio,
    calc_dilution_rate,
)
from token_emissions.core.models import AllocationInput
from token_emissions.core.types import VestingType


class TestSupplyFormulas:
    """Tests for standalone supply formulas."""

    def test_calc_circulation_ratio(self):
        """Test circulating / total × 100."""
        assert calc_circulation_ratio(50_000, 100_000) == 50.0
        assert calc_circulation_ratio(3_475_000_000, 10_000_000_000) == pytest.approx(34.75)

    def test_calc_circulation_ratio_zero_total(self):
        """Test that zero total supply yields zero instead of raising."""
        assert calc_circulation_ratio(1000, 0) == 0.0

    def test_calc_dilution_rate(self):
        """Test (total - circulating) / circulating × 100."""
        assert calc_dilution_rate(50_000, 100_000) == 100.0
        assert calc_dilution_rate(25, 100) == 300.0

    def test_calc_dilution_rate_zero_circulating(self):
        """Test that zero circulating supply yields zero instead of raising."""
        assert calc_dilution_rate(0, 100_000) == 0.0


class TestAnalyticsDeriver:
    """Tests for AnalyticsDeriver."""

    @pytest.fixture
    def deriver(self) -> AnalyticsDeriver:
        return AnalyticsDeriver()

    def test_supply_metrics(self, deriver):
        """Test circulation ratio, locked share and dilution snapshot."""
        project = Aggregator().aggregate([], 12)
        analytics = deriver.derive(project, 1.0, 50_000, 100_000)

        assert analytics.circulation_ratio == 50.0
        assert analytics.locked_pct == 50.0
        assert analytics.inflation_rate == 100.0

    def test_unlock_value(self, deriver, sample_allocations):
        """Test unlock value = emissions × price."""
        analytics = deriver.compute(sample_allocations, 2.0, 5000, 10000, months=12)

        assert len(analytics.unlock_value_per_month) == 12
        assert analytics.unlock_value_per_month[0] == 2000.0
        assert analytics.unlock_value_per_month[3] == 6000.0
        assert analytics.total_unlock_value == 20000.0

    def test_cliff_and_linear_split(self, deriver, sample_allocations):
        """Test that post-TGE remainders are split by release shape."""
        analytics = deriver.compute(sample_allocations, 2.0, 5000, 10000, months=12)

        assert analytics.cliff_unlock_tokens == 3000
        assert analytics.linear_unlock_tokens == 6000
        assert analytics.cliff_unlock_pct == pytest.approx(30.0)
        assert analytics.linear_unlock_pct == pytest.approx(60.0)
        assert analytics.total_unlock_pct == pytest.approx(90.0)

    def test_immediate_counts_as_neither(self, deriver):
        """Test that immediate allocations add to neither cliff nor linear tokens."""
        alloc = AllocationInput(
            category="Airdrop", total_tokens=1000, vesting_type=VestingType.IMMEDIATE,
        )
        analytics = deriver.compute([alloc], 1.0, 1000, 1000, months=6)

        assert analytics.cliff_unlock_tokens == 0
        assert analytics.linear_unlock_tokens == 0
        assert analytics.total_unlock_value == 1000.0

    def test_zero_supply_does_not_raise(self, deriver, sample_allocations):
        """Test that degenerate supply figures give finite results."""
        analytics = deriver.compute(sample_allocations, 0.0, 0, 0, months=12)

        assert analytics.circulation_ratio == 0.0
        assert analytics.locked_pct == 100.0
        assert analytics.inflation_rate == 0.0
        assert analytics.total_unlock_value == 0.0

    def test_zero_price(self, deriver, sample_allocations):
        """Test that a zero price yields zero unlock value."""
        analytics = deriver.compute(sample_allocations, 0.0, 5000, 10000, months=12)

        assert analytics.unlock_value_per_month == [0.0] * 12
