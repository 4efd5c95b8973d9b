"""Emission schedule calculation module."""

from .schedule import (
    ScheduleCalculator,
    cumulative_to_deltas,
    delta_to_cumulative,
    round_half_up,
)
from .aggregator import Aggregator, monthly_inflation_rates
from .analytics import AnalyticsDeriver
from .timeline import month_labels

__all__ = [
    "ScheduleCalculator",
    "Aggregator",
    "AnalyticsDeriver",
    "cumulative_to_deltas",
    "delta_to_cumulative",
    "round_half_up",
    "monthly_inflation_rates",
    "month_labels",
]
