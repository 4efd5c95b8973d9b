"""Project-level aggregation of allocation schedules.

Sums the per-allocation release vectors into a project emission series and
derives the month-over-month inflation rate and discrete cliff events.
"""

import logging
from datetime import date
from typing import Sequence

from ..core.config import DEFAULT_MONTHS
from ..core.models import (
    AllocationInput,
    AllocationSchedule,
    CliffEvent,
    ProjectEmissions,
)
from ..core.types import StandardGroup, VestingType
from .schedule import ScheduleCalculator
from .timeline import month_labels

logger = logging.getLogger(__name__)


def monthly_inflation_rates(
    monthly_emissions: Sequence[float],
    cumulative_supply: Sequence[float],
) -> list[float]:
    """
    Month-over-month growth of cumulative supply, in percent.

    Formula: rate[m] = emissions[m] / cumulative[m-1] × 100

    Month 0 and any month without a positive prior base are 0.
    """
    rates = [0.0] * len(monthly_emissions)
    for m in range(1, len(monthly_emissions)):
        if cumulative_supply[m - 1] > 0:
            rates[m] = monthly_emissions[m] / cumulative_supply[m - 1] * 100
    return rates


class Aggregator:
    """Aggregates allocation inputs into a ProjectEmissions record."""

    def __init__(self, calculator: ScheduleCalculator | None = None):
        self.calculator = calculator or ScheduleCalculator()

    def build_schedule(
        self,
        allocation: AllocationInput,
        months: int = DEFAULT_MONTHS,
    ) -> AllocationSchedule:
        """Compute one allocation's schedule with its defaults resolved."""
        monthly, cumulative = self.calculator.compute(allocation, months)
        return AllocationSchedule(
            category=allocation.category,
            standard_group=allocation.standard_group or StandardGroup.COMMUNITY,
            percentage=allocation.percentage or 0.0,
            total_tokens=allocation.total_tokens,
            vesting_type=allocation.vesting_type,
            cliff_months=allocation.cliff_months,
            vesting_months=allocation.vesting_months,
            tge_percent=allocation.tge_percent,
            monthly_emissions=monthly,
            cumulative_supply=cumulative,
        )

    def aggregate(
        self,
        allocations: Sequence[AllocationInput],
        months: int = DEFAULT_MONTHS,
        tge_date: date | None = None,
    ) -> ProjectEmissions:
        """
        Aggregate allocations into project-level emission series.

        Args:
            allocations: Normalized allocation inputs, in display order
            months: Analysis window length in months
            tge_date: Optional TGE date used to label months "YYYY-MM"

        Returns:
            ProjectEmissions with totals, inflation rate and cliff events
        """
        months = max(months, 0)
        schedules = [self.build_schedule(a, months) for a in allocations]

        # Sum of already-rounded per-allocation values
        total_monthly = [0] * months
        for schedule in schedules:
            for m in range(months):
                total_monthly[m] += schedule.monthly_emissions[m]

        total_cumulative = []
        running = 0
        for value in total_monthly:
            running += value
            total_cumulative.append(running)

        labels = month_labels(tge_date, months) if tge_date else []

        return ProjectEmissions(
            months=months,
            total_monthly_emissions=total_monthly,
            total_cumulative_supply=total_cumulative,
            monthly_inflation_rate=monthly_inflation_rates(total_monthly, total_cumulative),
            cliff_events=self._cliff_events(schedules, months, labels),
            allocations=schedules,
            month_labels=labels,
        )

    def _cliff_events(
        self,
        schedules: Sequence[AllocationSchedule],
        months: int,
        labels: Sequence[str],
    ) -> list[CliffEvent]:
        """Discrete cliff unlocks that land strictly inside the window."""
        events = []
        for schedule in schedules:
            if schedule.vesting_type != VestingType.CLIFF:
                continue

            cliff = schedule.cliff_months
            if not 0 < cliff < months:
                if cliff >= months:
                    logger.debug(
                        f"Dropping cliff event for {schedule.category}: "
                        f"month {cliff} outside {months}-month window"
                    )
                continue

            amount = schedule.monthly_emissions[cliff]
            if amount > 0:
                events.append(
                    CliffEvent(
                        month_index=cliff,
                        label=f"{schedule.category} Cliff Unlock",
                        amount=amount,
                        month_label=labels[cliff] if labels else None,
                    )
                )
        return events
