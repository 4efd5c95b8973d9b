"""Input normalization module."""

from .normalizer import (
    InputNormalizer,
    coerce_months,
    coerce_number,
    coerce_percent,
    to_allocation_input,
)

__all__ = [
    "InputNormalizer",
    "coerce_months",
    "coerce_number",
    "coerce_percent",
    "to_allocation_input",
]
