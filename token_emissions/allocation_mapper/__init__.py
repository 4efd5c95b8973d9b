"""Allocation mapping module.

Maps allocation labels to standard groups and parses vesting descriptions.
"""

from .mapper import AllocationMapper
from .vesting_parser import VestingParser, parse_vesting_type

__all__ = ["AllocationMapper", "VestingParser", "parse_vesting_type"]
