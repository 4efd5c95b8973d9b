"""Cross-project comparison module."""

from .engine import ComparisonEngine, RANKABLE_FIELDS, annualize
from .categories import TOKEN_CATEGORIES, get_token_category

__all__ = [
    "ComparisonEngine",
    "RANKABLE_FIELDS",
    "annualize",
    "TOKEN_CATEGORIES",
    "get_token_category",
]
