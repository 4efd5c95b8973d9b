"""Vesting schedule parser.

Parses free-text vesting descriptions into structured VestingTerms objects.
Handles common formats like:
- "10% TGE, 6 month cliff, 24 months linear"
- "20% at launch, then monthly over 12 months"
- "1 year cliff, 2 years linear vesting"
- "100% unlocked at TGE"
"""

import logging
import math
import re
from typing import Any

from ..core.models import VestingTerms
from ..core.types import VestingType

logger = logging.getLogger(__name__)

_NUMBER = r"(\d+(?:\.\d+)?)"
_MONTHS = r"(?:months?|mos?|m)"


def _compile(pairs: list[tuple[str, int]]) -> list[tuple[re.Pattern, int]]:
    return [(re.compile(pattern, re.IGNORECASE), factor) for pattern, factor in pairs]


# (pattern, multiplier) pairs tried in order; years convert to months
TGE_PATTERNS = _compile([
    (_NUMBER + r"\s*%?\s*(?:at\s+)?(?:tge|launch|listing|initial|unlock)", 1),
    (r"(?:tge|launch|listing|initial)\s*(?:unlock)?\s*(?:of\s+)?" + _NUMBER + r"\s*%", 1),
])
CLIFF_PATTERNS = _compile([
    (r"(\d+)\s*-?\s*" + _MONTHS + r"\s*cliff", 1),
    (r"cliff\s*(?:of\s+)?(\d+)\s*" + _MONTHS + r"\b", 1),
    (r"(\d+)\s*-?\s*years?\s*cliff", 12),
])
DURATION_PATTERNS = _compile([
    (r"(?:over|for|linear)\s*(\d+)\s*" + _MONTHS + r"\b", 1),
    (r"(\d+)\s*-?\s*" + _MONTHS + r"\s*(?:linear|vesting)", 1),
    (r"(\d+)\s*-?\s*years?\s*(?:linear|vesting)", 12),
    (r"(?:over|for)\s*(\d+)\s*years?", 12),
])

_MONTHLY = r"monthly|each\s*month"
_QUARTERLY = r"quarterly|every\s*(?:3|three)\s*month"

# First matching shape wins; monthly and quarterly steps count as linear
SHAPE_KEYWORDS = [
    (VestingType.IMMEDIATE, re.compile(
        r"fully\s*unlocked|no\s*vesting|immediate|100\s*%\s*(?:at\s+)?(?:tge|launch|unlock)",
        re.IGNORECASE,
    )),
    (VestingType.CLIFF, re.compile(
        r"cliff\s*(?:release|unlock)|(?:release|unlock)\s*after\s*cliff",
        re.IGNORECASE,
    )),
    (VestingType.LINEAR, re.compile(
        rf"linear|straight|continuous|{_MONTHLY}|{_QUARTERLY}",
        re.IGNORECASE,
    )),
]
FREQUENCY_KEYWORDS = [
    ("monthly", re.compile(_MONTHLY, re.IGNORECASE)),
    ("quarterly", re.compile(_QUARTERLY, re.IGNORECASE)),
]

VESTING_TYPE_ALIASES = {
    "linear": VestingType.LINEAR,
    "step": VestingType.LINEAR,
    "periodic": VestingType.LINEAR,
    "monthly": VestingType.LINEAR,
    "cliff": VestingType.CLIFF,
    "cliff_only": VestingType.CLIFF,
    "immediate": VestingType.IMMEDIATE,
    "unlocked": VestingType.IMMEDIATE,
    "none": VestingType.IMMEDIATE,
}

# Accepted keys per VestingTerms field in dict input, in lookup order
DICT_KEYS = {
    "tge": ("tge_percent", "tgePercent", "tge_unlock_pct", "tgeUnlock",
            "initial_unlock", "initialUnlock", "tge"),
    "cliff": ("cliff_months", "cliffMonths", "cliff"),
    "duration": ("vesting_months", "vestingMonths", "duration", "durationMonths"),
    "shape": ("vesting_type", "vestingType", "schedule_type", "scheduleType", "type", "schedule"),
    "frequency": ("unlock_frequency", "unlockFrequency", "frequency"),
    "description": ("raw_description", "description", "notes", "text"),
}


def parse_vesting_type(value: Any) -> VestingType | None:
    """Map a loosely spelled schedule name to a VestingType, or None if unknown."""
    if value is None:
        return None
    if isinstance(value, VestingType):
        return value
    return VESTING_TYPE_ALIASES.get(str(value).strip().lower())


def _as_number(value: Any) -> float | None:
    """Float conversion that yields None for missing or unparseable values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_months(value: Any) -> int | None:
    number = _as_number(value)
    return int(number) if number is not None else None


def _first_present(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Value of the first key that is present and not None."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _first_number(text: str, patterns: list[tuple[re.Pattern, int]]) -> float | None:
    for pattern, factor in patterns:
        match = pattern.search(text)
        if match:
            return float(match.group(1)) * factor
    return None


class VestingParser:
    """Parses vesting descriptions into structured data."""

    def parse(self, text: str | None) -> VestingTerms | None:
        """
        Parse a vesting description into structured terms.

        Args:
            text: Free-text vesting description

        Returns:
            VestingTerms or None if text is empty
        """
        text = str(text).strip() if text else ""
        if not text:
            return None

        shape = next((t for t, pattern in SHAPE_KEYWORDS if pattern.search(text)), None)
        frequency = next((f for f, pattern in FREQUENCY_KEYWORDS if pattern.search(text)), None)

        terms = VestingTerms(
            tge_percent=_first_number(text, TGE_PATTERNS),
            cliff_months=_as_months(_first_number(text, CLIFF_PATTERNS)),
            vesting_months=_as_months(_first_number(text, DURATION_PATTERNS)),
            vesting_type=shape,
            unlock_frequency=frequency,
            raw_description=text,
        )

        if not terms.has_details:
            logger.debug(f"No vesting details recognized in: {text!r}")

        return terms

    def parse_dict(self, data: dict[str, Any] | None) -> VestingTerms | None:
        """
        Parse vesting from a dictionary, whatever its key naming.

        Structured fields win; a description is parsed only when no
        structured field is present.
        """
        if not data:
            return None

        values = {field: _first_present(data, keys) for field, keys in DICT_KEYS.items()}
        description = values["description"]

        terms = VestingTerms(
            tge_percent=_as_number(values["tge"]),
            cliff_months=_as_months(values["cliff"]),
            vesting_months=_as_months(values["duration"]),
            vesting_type=parse_vesting_type(values["shape"]),
            unlock_frequency=str(values["frequency"]) if values["frequency"] else None,
            raw_description=str(description) if description else None,
        )

        if description and not terms.has_details:
            return self.parse(str(description)) or terms

        if terms.has_details or terms.raw_description:
            return terms

        return None

    def format_summary(self, terms: VestingTerms | None) -> str:
        """Short human-readable summary, e.g. "10% TGE, 6mo cliff, 24mo linear"."""
        if not terms:
            return "No vesting info"

        if terms.vesting_type == VestingType.IMMEDIATE:
            return "Fully unlocked at TGE"

        parts = []
        if terms.tge_percent:
            parts.append(f"{terms.tge_percent:.0f}% TGE")
        if terms.cliff_months:
            parts.append(f"{terms.cliff_months}mo cliff")
        if terms.vesting_months:
            parts.append(f"{terms.vesting_months}mo {terms.unlock_frequency or 'linear'}")
        elif terms.vesting_type == VestingType.CLIFF and terms.cliff_months:
            parts.append("lump at cliff")

        if parts:
            return ", ".join(parts)

        if terms.raw_description:
            desc = terms.raw_description
            return desc if len(desc) <= 50 else desc[:47] + "..."

        return "Vesting details available"
