"""Type definitions and enums for the emissions engine."""

from enum import Enum


class VestingType(str, Enum):
    """Release shape applied to the post-TGE remainder of an allocation."""

    LINEAR = "linear"         # Equal monthly installments after the cliff
    CLIFF = "cliff"           # Single lump at the cliff month
    IMMEDIATE = "immediate"   # Everything at month 0


class StandardGroup(str, Enum):
    """Standard allocation groups used to compare projects side by side."""

    TEAM = "team"
    ADVISORS = "advisors"
    INVESTORS = "investors"
    PUBLIC_SALE = "public_sale"
    AIRDROP = "airdrop"
    COMMUNITY = "community"
    LIQUIDITY = "liquidity"
    ECOSYSTEM = "ecosystem"
    TREASURY = "treasury"

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.TEAM: "Team / Founders",
            self.ADVISORS: "Advisors / Partners",
            self.INVESTORS: "Investors",
            self.PUBLIC_SALE: "Public Sale",
            self.AIRDROP: "Airdrop",
            self.COMMUNITY: "Community / Rewards",
            self.LIQUIDITY: "Listing / Liquidity",
            self.ECOSYSTEM: "Ecosystem / R&D",
            self.TREASURY: "Treasury / Reserve",
        }
        return names.get(self, self.value)


class DataSource(str, Enum):
    """Data source identifiers."""

    COINGECKO = "coingecko"
    MANUAL = "manual"
    UNKNOWN = "unknown"


# Type aliases for common patterns
Percentage = float  # 0-100 scale
TokenAmount = float  # Number of tokens
USDAmount = float    # USD value
