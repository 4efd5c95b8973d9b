"""Cross-project comparison read models.

Three independent projections over many projects:
- ranking rows with unlock, dilution and market metrics
- annualized inflation for years one to three plus the latest month
- market-wide unlock value per month, split into cliff and linear releases
"""

import logging
from typing import Sequence

from ..calculator.aggregator import Aggregator
from ..calculator.analytics import AnalyticsDeriver
from ..core.config import DEFAULT_MONTHS
from ..core.models import (
    ComparisonRow,
    InflationPeriodRow,
    MarketEmissionsRow,
    ProjectAnalytics,
    ProjectEmissions,
    ProjectInput,
    ProjectMeta,
)
from .categories import get_token_category

logger = logging.getLogger(__name__)

RANKABLE_FIELDS = (
    "total_unlock_value",
    "cliff_unlock_pct",
    "linear_unlock_pct",
    "total_unlock_pct",
    "inflation_rate",
    "circulation_ratio",
    "locked_pct",
    "market_cap",
    "current_price",
    "total_supply",
    "circulating_supply",
)


def annualize(monthly_rate: float) -> float:
    """
    Compound a monthly rate over twelve months.

    Formula: ((1 + monthly_rate/100)^12 - 1) × 100

    Rates too large to compound in a float give infinity.
    """
    try:
        return ((1 + monthly_rate / 100) ** 12 - 1) * 100
    except OverflowError:
        return float("inf")


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class ComparisonEngine:
    """Builds comparison tables over a set of projects."""

    def __init__(
        self,
        aggregator: Aggregator | None = None,
        deriver: AnalyticsDeriver | None = None,
    ):
        self.aggregator = aggregator or Aggregator()
        self.deriver = deriver or AnalyticsDeriver(self.aggregator)

    def build_row(
        self,
        project: ProjectInput,
        analytics: ProjectAnalytics,
    ) -> ComparisonRow:
        """Project one project's analytics and market data into a ranking row."""
        return ComparisonRow(
            name=project.name,
            symbol=project.symbol,
            coingecko_id=project.coingecko_id,
            image=project.image,
            category=get_token_category(project.coingecko_id),
            total_unlock_value=analytics.total_unlock_value,
            cliff_unlock_pct=analytics.cliff_unlock_pct,
            linear_unlock_pct=analytics.linear_unlock_pct,
            total_unlock_pct=analytics.total_unlock_pct,
            inflation_rate=analytics.inflation_rate,
            circulation_ratio=analytics.circulation_ratio,
            locked_pct=analytics.locked_pct,
            market_cap=project.market_cap,
            current_price=project.current_price,
            total_supply=project.total_supply,
            circulating_supply=project.circulating_supply,
        )

    def compare(
        self,
        projects: Sequence[ProjectInput],
        months: int = DEFAULT_MONTHS,
    ) -> list[ComparisonRow]:
        """
        Compute one comparison row per project, in input order.

        Args:
            projects: Projects with market data and allocations
            months: Analysis window length in months

        Returns:
            List of ComparisonRow
        """
        rows = []
        for project in projects:
            analytics = self.deriver.compute(
                project.allocations,
                project.current_price,
                project.circulating_supply,
                project.total_supply,
                months,
            )
            rows.append(self.build_row(project, analytics))
        return rows

    def rank(
        self,
        rows: Sequence[ComparisonRow],
        field: str,
        descending: bool = True,
    ) -> list[ComparisonRow]:
        """
        Sort rows on a numeric field.

        The sort is stable, so ties keep their input order in either direction.

        Raises:
            ValueError: If field is not a numeric ComparisonRow field
        """
        if field not in RANKABLE_FIELDS:
            raise ValueError(
                f"Cannot rank on '{field}'; choose one of: {', '.join(RANKABLE_FIELDS)}"
            )
        return sorted(rows, key=lambda row: getattr(row, field), reverse=descending)

    def inflation_periods(
        self,
        entries: Sequence[tuple[ProjectMeta, Sequence[float]]],
    ) -> list[InflationPeriodRow]:
        """
        Annualize monthly inflation-rate series per project.

        Years one to three average non-overlapping 12-month windows before
        annualizing. The current figure annualizes only the last month's rate.

        Args:
            entries: Pairs of (project identification, monthly inflation rates)

        Returns:
            List of InflationPeriodRow, in input order
        """
        rows = []
        for meta, rates in entries:
            rates = list(rates)
            rows.append(
                InflationPeriodRow(
                    name=meta.name,
                    symbol=meta.symbol,
                    coingecko_id=meta.coingecko_id,
                    image=meta.image,
                    year1_inflation=annualize(_mean(rates[0:12])),
                    year2_inflation=annualize(_mean(rates[12:24])),
                    year3_inflation=annualize(_mean(rates[24:36])),
                    current_inflation=annualize(rates[-1]) if rates else 0.0,
                )
            )
        return rows

    def inflation_periods_for(
        self,
        projects: Sequence[ProjectInput],
        months: int = DEFAULT_MONTHS,
    ) -> list[InflationPeriodRow]:
        """Aggregate each project's allocations, then annualize its inflation."""
        entries = []
        for project in projects:
            emissions = self.aggregator.aggregate(project.allocations, months)
            entries.append((project, emissions.monthly_inflation_rate))
        return self.inflation_periods(entries)

    def market_emissions(
        self,
        projects: Sequence[tuple[ProjectEmissions, float]],
        months: int = DEFAULT_MONTHS,
    ) -> list[MarketEmissionsRow]:
        """
        Sum unlock value across all projects for each month of the window.

        Args:
            projects: Pairs of (aggregated emissions, current price)
            months: Number of month rows to produce

        Returns:
            One MarketEmissionsRow per month index
        """
        rows = []
        for i in range(months):
            total_value = 0.0
            cliff_value = 0.0
            linear_value = 0.0

            for emissions, price in projects:
                price = price or 0.0
                for schedule in emissions.allocations:
                    if i >= len(schedule.monthly_emissions):
                        continue
                    value = schedule.monthly_emissions[i] * price
                    total_value += value
                    if schedule.is_cliff_release:
                        cliff_value += value
                    else:
                        linear_value += value

            rows.append(
                MarketEmissionsRow(
                    month_index=i,
                    total_value_unlock=total_value,
                    cliff_value_unlock=cliff_value,
                    linear_value_unlock=linear_value,
                )
            )

        logger.debug(f"Market emissions over {len(projects)} projects, {months} months")
        return rows
