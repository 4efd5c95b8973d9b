"""Data providers around the emissions engine.

This module contains providers for:
- Market data (CoinGecko)
- Allocation data (manual YAML/JSON files)
"""

from .base import BaseProvider, CachedProvider

__all__ = ["BaseProvider", "CachedProvider"]
