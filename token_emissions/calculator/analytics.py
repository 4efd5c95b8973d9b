"""Single-project analytics derived from emission series.

All calculations use explicit formulas:
- Unlock value = monthly emissions × current price
- Circulation ratio = circulating_supply / total_supply × 100
- Locked % = 100 - circulation ratio
- Inflation rate = (total_supply - circulating_supply) / circulating_supply × 100

The last one is a snapshot of maximum future dilution. It is unrelated to the
month-over-month rate in ProjectEmissions.monthly_inflation_rate.
"""

import logging
from typing import Sequence

from ..core.config import DEFAULT_MONTHS
from ..core.models import AllocationInput, ProjectAnalytics, ProjectEmissions
from .aggregator import Aggregator
from .schedule import round_half_up

logger = logging.getLogger(__name__)


def calc_circulation_ratio(circulating_supply: float, total_supply: float) -> float:
    """
    Share of total supply already circulating, in percent.

    Returns 0 when total supply is not positive.
    """
    if total_supply <= 0:
        return 0.0
    return circulating_supply / total_supply * 100


def calc_dilution_rate(circulating_supply: float, total_supply: float) -> float:
    """
    Locked supply relative to circulating supply, in percent.

    Formula: (total_supply - circulating_supply) / circulating_supply × 100

    Returns 0 when circulating supply is not positive.
    """
    if circulating_supply <= 0:
        return 0.0
    return (total_supply - circulating_supply) / circulating_supply * 100


class AnalyticsDeriver:
    """Derives unlock value and supply metrics for one project."""

    def __init__(self, aggregator: Aggregator | None = None):
        self.aggregator = aggregator or Aggregator()

    def derive(
        self,
        project: ProjectEmissions,
        current_price: float,
        circulating_supply: float,
        total_supply: float,
    ) -> ProjectAnalytics:
        """
        Derive analytics from an aggregated project.

        Args:
            project: Aggregated emissions for the project
            current_price: Current token price in USD
            circulating_supply: Circulating supply as of now
            total_supply: Total (or max) supply

        Returns:
            ProjectAnalytics
        """
        unlock_value_per_month = [
            tokens * current_price for tokens in project.total_monthly_emissions
        ]
        total_unlock_value = sum(unlock_value_per_month)

        cliff_tokens = 0.0
        linear_tokens = 0.0
        for schedule in project.allocations:
            tge_tokens = round_half_up(schedule.total_tokens * schedule.tge_percent / 100)
            remaining = schedule.total_tokens - tge_tokens
            if schedule.is_cliff_release:
                cliff_tokens += remaining
            elif schedule.is_linear_release:
                linear_tokens += remaining

        # Shares of project-wide supply, not of each allocation
        safe_total = total_supply or 1
        cliff_pct = cliff_tokens / safe_total * 100
        linear_pct = linear_tokens / safe_total * 100

        circulation_ratio = calc_circulation_ratio(circulating_supply, total_supply)

        return ProjectAnalytics(
            unlock_value_per_month=unlock_value_per_month,
            total_unlock_value=total_unlock_value,
            cliff_unlock_tokens=cliff_tokens,
            linear_unlock_tokens=linear_tokens,
            cliff_unlock_pct=cliff_pct,
            linear_unlock_pct=linear_pct,
            total_unlock_pct=cliff_pct + linear_pct,
            inflation_rate=calc_dilution_rate(circulating_supply, total_supply),
            circulation_ratio=circulation_ratio,
            locked_pct=100 - circulation_ratio,
        )

    def compute(
        self,
        allocations: Sequence[AllocationInput],
        current_price: float,
        circulating_supply: float,
        total_supply: float,
        months: int = DEFAULT_MONTHS,
    ) -> ProjectAnalytics:
        """Aggregate allocations over the window, then derive analytics."""
        project = self.aggregator.aggregate(allocations, months)
        return self.derive(project, current_price, circulating_supply, total_supply)
