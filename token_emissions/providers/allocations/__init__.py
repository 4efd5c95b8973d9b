"""Allocation data providers."""

from .manual_alloc import ManualAllocationProvider

__all__ = ["ManualAllocationProvider"]
