"""Input normalizer - the single adapter between raw records and the engine.

Raw allocation records arrive in several shapes: camelCase API payloads,
snake_case database rows, percent-of-supply entries without token counts,
and free-text vesting descriptions. Everything is resolved here so the
calculator stages only ever see a clean AllocationInput.

Degenerate values never raise: missing, NaN, infinite, negative or
non-numeric numbers become 0, unknown vesting types become linear, and the
TGE percentage is clamped to 0-100.
"""

import logging
import math
from typing import Any, Iterable, Mapping

from ..allocation_mapper.mapper import AllocationMapper
from ..allocation_mapper.vesting_parser import VestingParser, parse_vesting_type
from ..calculator.schedule import round_half_up
from ..core.models import AllocationInput, VestingTerms
from ..core.types import StandardGroup, VestingType

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Unknown"

# Accepted spellings per canonical field, in lookup order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "category": ("category", "name", "label"),
    "standard_group": ("standardGroup", "standard_group", "group"),
    "percentage": ("percentage", "percent", "pct"),
    "total_tokens": ("totalTokens", "total_tokens", "tokens", "amount"),
    "tge_percent": ("tgePercent", "tge_percent", "tgeUnlockPct", "tge_unlock_pct"),
    "cliff_months": ("cliffMonths", "cliff_months"),
    "vesting_months": ("vestingMonths", "vesting_months"),
    "vesting_type": ("vestingType", "vesting_type"),
    "vesting": ("vesting", "vestingSchedule", "vesting_schedule"),
}


def coerce_number(value: Any) -> float:
    """
    Convert a loosely typed value to a non-negative float.

    None, booleans, unparseable strings, NaN, infinities and negative
    numbers all become 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def coerce_months(value: Any) -> int:
    """Whole months, truncated, never negative."""
    return int(coerce_number(value))


def coerce_percent(value: Any) -> float:
    """Percentage clamped to the 0-100 range."""
    return min(coerce_number(value), 100.0)


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    """First non-None value among the accepted spellings of a field."""
    for key in FIELD_ALIASES[field]:
        value = raw.get(key)
        if value is not None:
            return value
    return None


class InputNormalizer:
    """Adapts heterogeneous allocation records into AllocationInput."""

    def __init__(
        self,
        mapper: AllocationMapper | None = None,
        parser: VestingParser | None = None,
    ):
        self.mapper = mapper or AllocationMapper()
        self.parser = parser or VestingParser()

    def _vesting_terms(self, raw: Mapping[str, Any]) -> VestingTerms | None:
        """Parse a nested vesting description, if the record carries one."""
        vesting = _lookup(raw, "vesting")
        if isinstance(vesting, str):
            return self.parser.parse(vesting)
        if isinstance(vesting, Mapping):
            return self.parser.parse_dict(dict(vesting))
        return None

    def _resolve_tokens(
        self,
        raw: Mapping[str, Any],
        percentage: float,
        total_supply: float | None,
    ) -> float:
        """
        Absolute token count for an allocation.

        An explicit positive token count wins; otherwise the percentage is
        applied to total supply (rounded half-up) when supply is known.
        """
        tokens = coerce_number(_lookup(raw, "total_tokens"))
        if tokens > 0:
            return tokens
        supply = coerce_number(total_supply)
        if supply > 0:
            return float(round_half_up(supply * percentage / 100))
        return 0.0

    def _resolve_group(self, raw_group: Any, category: str) -> StandardGroup:
        if isinstance(raw_group, StandardGroup):
            return raw_group
        if raw_group is not None:
            try:
                return StandardGroup(str(raw_group).strip().lower())
            except ValueError:
                logger.debug(f"Unknown standard group '{raw_group}' for {category}")
        return self.mapper.get_group_for_label(category)

    def normalize(
        self,
        raw: Mapping[str, Any] | AllocationInput,
        total_supply: float | None = None,
    ) -> AllocationInput:
        """
        Normalize one raw allocation record.

        Args:
            raw: Mapping in any supported naming convention, or an
                AllocationInput (returned unchanged)
            total_supply: Project supply used to turn percentages into tokens

        Returns:
            AllocationInput with every field resolved
        """
        if isinstance(raw, AllocationInput):
            return raw

        terms = self._vesting_terms(raw)

        category = str(_lookup(raw, "category") or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
        percentage = coerce_percent(_lookup(raw, "percentage"))

        tge = _lookup(raw, "tge_percent")
        cliff = _lookup(raw, "cliff_months")
        vesting = _lookup(raw, "vesting_months")
        vesting_type_raw = _lookup(raw, "vesting_type")

        # Top-level fields take precedence over a parsed description
        if terms is not None:
            tge = tge if tge is not None else terms.tge_percent
            cliff = cliff if cliff is not None else terms.cliff_months
            vesting = vesting if vesting is not None else terms.vesting_months
            if vesting_type_raw is None and terms.vesting_type is not None:
                vesting_type_raw = terms.vesting_type

        vesting_type = parse_vesting_type(vesting_type_raw)
        if vesting_type is None:
            if vesting_type_raw is not None:
                logger.debug(f"Unknown vesting type '{vesting_type_raw}' for {category}, using linear")
            vesting_type = VestingType.LINEAR

        return AllocationInput(
            category=category,
            standard_group=self._resolve_group(_lookup(raw, "standard_group"), category),
            total_tokens=self._resolve_tokens(raw, percentage, total_supply),
            tge_percent=coerce_percent(tge),
            cliff_months=coerce_months(cliff),
            vesting_months=coerce_months(vesting),
            vesting_type=vesting_type,
            percentage=percentage,
        )

    def normalize_many(
        self,
        records: Iterable[Mapping[str, Any] | AllocationInput],
        total_supply: float | None = None,
    ) -> list[AllocationInput]:
        """Normalize a list of records, preserving order."""
        allocations = [self.normalize(r, total_supply) for r in records]

        total_pct = sum(a.percentage or 0 for a in allocations)
        if total_pct > 100.5:
            logger.warning(f"Allocation percentages sum to {total_pct:.1f}% (> 100%)")

        return allocations


def to_allocation_input(
    raw: Mapping[str, Any],
    total_supply: float | None = None,
) -> AllocationInput:
    """Normalize a single record with the default mapper and parser."""
    return InputNormalizer().normalize(raw, total_supply)
