"""Tests for cross-project comparison read models."""

import pytest

from token_emissions.calculator.aggregator import Aggregator
from token_emissions.comparison import (
    RANKABLE_FIELDS,
    ComparisonEngine,
    annualize,
    get_token_category,
)
from token_emissions.core.models import AllocationInput, ComparisonRow, ProjectMeta
from token_emissions.core.types import VestingType


def row(name: str, **metrics) -> ComparisonRow:
    return ComparisonRow(name=name, symbol=name.upper(), **metrics)


class TestAnnualize:
    """Tests for compounding a monthly rate."""

    def test_zero(self):
        """Test that a zero monthly rate stays zero."""
        assert annualize(0.0) == 0.0

    def test_one_percent_monthly(self):
        """Test ((1 + r/100)^12 - 1) × 100."""
        assert annualize(1.0) == pytest.approx(12.682503, rel=1e-6)

    def test_overflowing_rate(self):
        """Test that a rate too large to compound yields infinity instead of raising."""
        assert annualize(1e30) == float("inf")


class TestCategories:
    """Tests for the static sector lookup."""

    def test_known_token(self):
        """Test a token listed in the table."""
        assert get_token_category("arbitrum") == "Layer 2"

    def test_first_listing_wins(self):
        """Test that a token in several sectors resolves to the first one."""
        assert get_token_category("gmx") == "DeFi"

    def test_unknown_token(self):
        """Test that an unlisted token has no category."""
        assert get_token_category("not-a-token") is None


class TestCompare:
    """Tests for ComparisonEngine.compare and rank."""

    @pytest.fixture
    def engine(self) -> ComparisonEngine:
        return ComparisonEngine()

    def test_row_metrics(self, engine, sample_project):
        """Test that a row carries analytics and market figures."""
        rows = engine.compare([sample_project], months=12)

        assert len(rows) == 1
        r = rows[0]
        assert r.symbol == "SMP"
        assert r.total_unlock_value == 20000.0
        assert r.cliff_unlock_pct == pytest.approx(30.0)
        assert r.linear_unlock_pct == pytest.approx(60.0)
        assert r.circulation_ratio == 50.0
        assert r.market_cap == 10000.0
        assert r.category is None

    def test_rows_in_input_order(self, engine, sample_project):
        """Test that compare preserves the input order."""
        other = sample_project.model_copy(update={"name": "Other", "symbol": "OTH"})
        rows = engine.compare([other, sample_project], months=12)

        assert [r.symbol for r in rows] == ["OTH", "SMP"]

    def test_rank_descending(self, engine):
        """Test sorting on a field, largest first."""
        rows = [row("a", locked_pct=10), row("b", locked_pct=30), row("c", locked_pct=20)]
        ranked = engine.rank(rows, "locked_pct")

        assert [r.name for r in ranked] == ["b", "c", "a"]

    def test_rank_ascending(self, engine):
        """Test sorting on a field, smallest first."""
        rows = [row("a", market_cap=3), row("b", market_cap=1), row("c", market_cap=2)]
        ranked = engine.rank(rows, "market_cap", descending=False)

        assert [r.name for r in ranked] == ["b", "c", "a"]

    def test_rank_is_stable(self, engine):
        """Test that ties keep their input order in either direction."""
        rows = [row("a", locked_pct=5), row("b", locked_pct=5), row("c", locked_pct=9)]

        assert [r.name for r in engine.rank(rows, "locked_pct")] == ["c", "a", "b"]
        assert [r.name for r in engine.rank(rows, "locked_pct", descending=False)] == ["a", "b", "c"]

    def test_rank_unknown_field(self, engine):
        """Test that ranking on a non-numeric field raises."""
        with pytest.raises(ValueError):
            engine.rank([row("a")], "name")

    def test_rankable_fields_exist_on_row(self):
        """Test that every rankable field is a ComparisonRow field."""
        for field in RANKABLE_FIELDS:
            assert field in ComparisonRow.model_fields


class TestInflationPeriods:
    """Tests for annualized inflation rows."""

    @pytest.fixture
    def engine(self) -> ComparisonEngine:
        return ComparisonEngine()

    def test_yearly_windows(self, engine):
        """Test averaging of 12-month windows and the latest month."""
        rates = [1.0] * 12 + [0.5] * 12 + [0.2] * 6
        rows = engine.inflation_periods([(ProjectMeta(name="X", symbol="X"), rates)])

        r = rows[0]
        assert r.name == "X"
        assert r.year1_inflation == pytest.approx(annualize(1.0))
        assert r.year2_inflation == pytest.approx(annualize(0.5))
        assert r.year3_inflation == pytest.approx(annualize(0.2))
        assert r.current_inflation == pytest.approx(annualize(0.2))

    def test_short_series(self, engine):
        """Test that years beyond the series are zero."""
        rows = engine.inflation_periods([(ProjectMeta(name="Y"), [0.0, 2.0, 4.0])])

        r = rows[0]
        assert r.year1_inflation == pytest.approx(annualize(2.0))
        assert r.year2_inflation == 0.0
        assert r.year3_inflation == 0.0
        assert r.current_inflation == pytest.approx(annualize(4.0))

    def test_extreme_rate(self, engine):
        """Test that one enormous month does not abort the period table."""
        rows = engine.inflation_periods([(ProjectMeta(name="W"), [0.0, 1e30])])

        r = rows[0]
        assert r.current_inflation == float("inf")
        assert r.year1_inflation == float("inf")

    def test_empty_series(self, engine):
        """Test that a project without rates reports zeros."""
        rows = engine.inflation_periods([(ProjectMeta(name="Z"), [])])

        assert rows[0].year1_inflation == 0.0
        assert rows[0].current_inflation == 0.0

    def test_inflation_periods_for_projects(self, engine, sample_project):
        """Test the convenience path that aggregates first."""
        rows = engine.inflation_periods_for([sample_project], months=12)
        rates = Aggregator().aggregate(sample_project.allocations, 12).monthly_inflation_rate

        assert rows[0].symbol == "SMP"
        assert rows[0].year1_inflation == pytest.approx(annualize(sum(rates) / 12))


class TestMarketEmissions:
    """Tests for market-wide unlock value."""

    @pytest.fixture
    def engine(self) -> ComparisonEngine:
        return ComparisonEngine()

    def test_linear_project(self, engine):
        """Test 1000 tokens per month at $10."""
        alloc = AllocationInput(
            category="Rewards", total_tokens=12000, vesting_months=12,
            vesting_type=VestingType.LINEAR,
        )
        emissions = Aggregator().aggregate([alloc], 12)
        rows = engine.market_emissions([(emissions, 10.0)], 12)

        assert len(rows) == 12
        for r in rows:
            assert r.total_value_unlock == pytest.approx(10000.0)
            assert r.linear_value_unlock == pytest.approx(10000.0)
            assert r.cliff_value_unlock == 0.0

    def test_cliff_and_linear_split(self, engine, sample_allocations):
        """Test that cliff-type schedules count as cliff value for every month."""
        emissions = Aggregator().aggregate(sample_allocations, 12)
        rows = engine.market_emissions([(emissions, 2.0)], 12)

        # Investor TGE belongs to a cliff-type schedule
        assert rows[0].cliff_value_unlock == 2000.0
        assert rows[3].cliff_value_unlock == 6000.0
        assert rows[6].linear_value_unlock == 2000.0
        assert rows[6].cliff_value_unlock == 0.0

    def test_sums_across_projects(self, engine, sample_allocations):
        """Test that values add up over projects."""
        emissions = Aggregator().aggregate(sample_allocations, 12)
        rows = engine.market_emissions([(emissions, 1.0), (emissions, 3.0)], 12)

        assert rows[3].total_value_unlock == 12000.0

    def test_months_beyond_series(self, engine, sample_allocations):
        """Test that months past a project's series contribute nothing."""
        emissions = Aggregator().aggregate(sample_allocations, 6)
        rows = engine.market_emissions([(emissions, 1.0)], 12)

        assert len(rows) == 12
        assert rows[11].total_value_unlock == 0.0
        assert [r.month_index for r in rows] == list(range(12))
