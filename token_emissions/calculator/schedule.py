"""Per-allocation vesting schedule calculator.

Turns one allocation's sparse vesting parameters into a month-by-month
release vector over a fixed analysis window:

- immediate (or no cliff and no vesting): everything releases at month 0
- cliff: TGE at month 0, the remainder as one lump at the cliff month
- linear: TGE at month 0, the remainder in equal installments after the cliff

Values are rounded half-up to whole tokens independently for each allocation.
"""

import logging
import math
from typing import Sequence

from ..core.config import DEFAULT_MONTHS
from ..core.models import AllocationInput
from ..core.types import VestingType

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative input."""
    return int(math.floor(value + 0.5))


def delta_to_cumulative(deltas: Sequence[float]) -> list[float]:
    """Running sum of a per-month series."""
    cumulative = []
    running = 0
    for delta in deltas:
        running += delta
        cumulative.append(running)
    return cumulative


def cumulative_to_deltas(cumulative: Sequence[float]) -> list[float]:
    """Per-month increments of a cumulative series, never negative after month 0."""
    deltas = []
    for i, value in enumerate(cumulative):
        if i == 0:
            deltas.append(value)
        else:
            deltas.append(max(value - cumulative[i - 1], 0))
    return deltas


class ScheduleCalculator:
    """Computes the monthly release vector of a single allocation."""

    def compute(
        self,
        allocation: AllocationInput,
        months: int = DEFAULT_MONTHS,
    ) -> tuple[list[int], list[int]]:
        """
        Compute monthly emissions and cumulative supply for one allocation.

        Args:
            allocation: Normalized allocation parameters
            months: Analysis window length in months

        Returns:
            Tuple of (monthly_emissions, cumulative_supply), each of length months
        """
        if months <= 0:
            return [], []

        emissions = self._raw_emissions(allocation, months)
        cumulative = delta_to_cumulative(emissions)

        return (
            [round_half_up(v) for v in emissions],
            [round_half_up(v) for v in cumulative],
        )

    def _raw_emissions(self, allocation: AllocationInput, months: int) -> list[float]:
        """Unrounded per-month release amounts."""
        total_tokens = allocation.total_tokens
        tge_tokens = round_half_up(total_tokens * allocation.tge_percent / 100)
        remaining = total_tokens - tge_tokens
        cliff = max(allocation.cliff_months, 0)
        vest = max(allocation.vesting_months, 0)
        vesting_type = allocation.vesting_type

        emissions: list[float] = [0.0] * months
        emissions[0] = tge_tokens

        if vesting_type == VestingType.IMMEDIATE or (vest == 0 and cliff == 0):
            emissions[0] = total_tokens

        elif vesting_type == VestingType.CLIFF:
            unlock_month = min(cliff, months - 1)
            if unlock_month > 0:
                emissions[unlock_month] = remaining
            else:
                emissions[0] = total_tokens

        elif vest > 0:
            per_month = remaining / vest
            for m in range(cliff, min(cliff + vest, months)):
                if m == 0:
                    emissions[0] += per_month
                else:
                    emissions[m] = per_month
            if cliff >= months:
                logger.debug(
                    f"{allocation.category}: cliff at month {cliff} is outside "
                    f"the {months}-month window, remainder not represented"
                )

        else:
            # No vesting duration but a cliff: lump at the cliff month
            unlock_month = min(cliff, months - 1)
            emissions[unlock_month] += remaining

        return emissions
