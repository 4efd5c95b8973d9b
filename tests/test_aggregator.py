"""Tests for project aggregation and calendar labels."""

from datetime import date

import pytest

from token_emissions.calculator.aggregator import Aggregator, monthly_inflation_rates
from token_emissions.calculator.timeline import month_labels
from token_emissions.core.models import AllocationInput
from token_emissions.core.types import StandardGroup, VestingType


class TestAggregator:
    """Tests for Aggregator.aggregate."""

    @pytest.fixture
    def aggregator(self) -> Aggregator:
        return Aggregator()

    def test_team_and_investors(self, aggregator, sample_allocations):
        """Test summed monthly totals for a two-allocation project."""
        project = aggregator.aggregate(sample_allocations, 12)

        assert project.months == 12
        assert project.total_monthly_emissions[0] == 1000
        assert project.total_monthly_emissions[3] == 3000
        assert project.total_monthly_emissions[6] == 1000
        assert project.total_cumulative_supply[-1] == 10000

    def test_single_cliff_event(self, aggregator, sample_allocations):
        """Test that only the cliff-type allocation yields a cliff event."""
        project = aggregator.aggregate(sample_allocations, 12)

        assert len(project.cliff_events) == 1
        event = project.cliff_events[0]
        assert event.month_index == 3
        assert event.amount == 3000
        assert event.label == "Investors Cliff Unlock"
        assert event.month_label is None

    def test_allocations_keep_input_order(self, aggregator, sample_allocations):
        """Test that schedules are returned in display order."""
        project = aggregator.aggregate(sample_allocations, 12)

        assert [s.category for s in project.allocations] == ["Team", "Investors"]
        assert project.allocations[1].monthly_emissions[3] == 3000

    def test_totals_equal_sum_of_rounded_schedules(self, aggregator):
        """Test that totals sum the already-rounded per-allocation values."""
        allocations = [
            AllocationInput(category="A", total_tokens=100, vesting_months=3),
            AllocationInput(category="B", total_tokens=100, vesting_months=3),
        ]
        project = aggregator.aggregate(allocations, 4)

        # Each schedule rounds 33.33 to 33 on its own
        assert project.allocations[0].monthly_emissions[0] == 33
        assert project.total_monthly_emissions[0] == 66
        for m in range(4):
            assert project.total_monthly_emissions[m] == sum(
                s.monthly_emissions[m] for s in project.allocations
            )

    def test_cliff_event_outside_window_dropped(self, aggregator):
        """Test that a cliff at or past the window end produces no event."""
        alloc = AllocationInput(
            category="Late", total_tokens=1000, cliff_months=24,
            vesting_type=VestingType.CLIFF,
        )
        project = aggregator.aggregate([alloc], 12)

        assert project.cliff_events == []

    @pytest.mark.parametrize("vesting_type", list(VestingType))
    def test_zero_token_allocations(self, aggregator, vesting_type):
        """Test that zero-token allocations give all-zero series and no events."""
        allocations = [
            AllocationInput(
                category="Empty", total_tokens=0, tge_percent=10, cliff_months=2,
                vesting_months=4, vesting_type=vesting_type,
            ),
        ]
        project = aggregator.aggregate(allocations, 6)

        assert project.total_monthly_emissions == [0] * 6
        assert project.total_cumulative_supply == [0] * 6
        assert project.monthly_inflation_rate == [0.0] * 6
        assert project.allocations[0].monthly_emissions == [0] * 6
        assert project.cliff_events == []

    def test_cliff_event_requires_positive_amount(self, aggregator):
        """Test that a fully-TGE cliff allocation produces no event."""
        alloc = AllocationInput(
            category="AllTge", total_tokens=1000, tge_percent=100, cliff_months=3,
            vesting_type=VestingType.CLIFF,
        )
        project = aggregator.aggregate([alloc], 12)

        assert project.cliff_events == []

    def test_month_labels_with_tge_date(self, aggregator, sample_allocations):
        """Test calendar labels on the series and on cliff events."""
        project = aggregator.aggregate(sample_allocations, 12, tge_date=date(2024, 11, 15))

        assert project.month_labels[0] == "2024-11"
        assert project.month_labels[2] == "2025-01"
        assert project.cliff_events[0].month_label == "2025-02"

    def test_missing_group_defaults_to_community(self, aggregator):
        """Test that an allocation without a group is reported as community."""
        alloc = AllocationInput(category="Misc", total_tokens=10)
        project = aggregator.aggregate([alloc], 3)

        assert project.allocations[0].standard_group == StandardGroup.COMMUNITY

    def test_empty_project(self, aggregator):
        """Test that no allocations give all-zero series."""
        project = aggregator.aggregate([], 6)

        assert project.total_monthly_emissions == [0] * 6
        assert project.total_cumulative_supply == [0] * 6
        assert project.monthly_inflation_rate == [0.0] * 6
        assert project.cliff_events == []


class TestMonthlyInflation:
    """Tests for month-over-month inflation rates."""

    def test_rates(self):
        """Test rate = emissions / previous cumulative × 100."""
        rates = monthly_inflation_rates([1000, 500, 0, 150], [1000, 1500, 1500, 1650])

        assert rates[0] == 0.0
        assert rates[1] == pytest.approx(50.0)
        assert rates[2] == 0.0
        assert rates[3] == pytest.approx(10.0)

    def test_zero_base(self):
        """Test that months without prior supply have zero rate."""
        rates = monthly_inflation_rates([0, 0, 100], [0, 0, 100])

        assert rates == [0.0, 0.0, 0.0]

    def test_aggregate_uses_project_totals(self, sample_allocations):
        """Test the inflation series on an aggregated project."""
        project = Aggregator().aggregate(sample_allocations, 12)

        # Month 3: 3000 released over a base of 1000
        assert project.monthly_inflation_rate[3] == pytest.approx(300.0)
        # Month 6: 1000 released over a base of 4000
        assert project.monthly_inflation_rate[6] == pytest.approx(25.0)


class TestMonthLabels:
    """Tests for calendar month labels."""

    def test_year_rollover(self):
        """Test labels crossing a year boundary."""
        assert month_labels(date(2023, 11, 30), 4) == [
            "2023-11", "2023-12", "2024-01", "2024-02",
        ]

    def test_empty_window(self):
        """Test zero-length window."""
        assert month_labels(date(2023, 1, 1), 0) == []
