"""Pytest configuration and fixtures for token emissions tests."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from token_emissions.core.config import EngineConfig
from token_emissions.core.models import AllocationInput, ProjectInput
from token_emissions.core.types import DataSource, StandardGroup, VestingType


@pytest.fixture
def engine_config() -> EngineConfig:
    """Config with defaults, independent of the environment."""
    return EngineConfig(default_months=24, max_months=120, batch_workers=4)


@pytest.fixture
def team_allocation() -> AllocationInput:
    """Team: 6000 tokens, 6-month cliff then 6 months linear."""
    return AllocationInput(
        category="Team",
        standard_group=StandardGroup.TEAM,
        total_tokens=6000,
        cliff_months=6,
        vesting_months=6,
        vesting_type=VestingType.LINEAR,
    )


@pytest.fixture
def investor_allocation() -> AllocationInput:
    """Investors: 4000 tokens, 25% at TGE, remainder as a lump at month 3."""
    return AllocationInput(
        category="Investors",
        standard_group=StandardGroup.INVESTORS,
        total_tokens=4000,
        tge_percent=25,
        cliff_months=3,
        vesting_type=VestingType.CLIFF,
    )


@pytest.fixture
def sample_allocations(
    team_allocation: AllocationInput,
    investor_allocation: AllocationInput,
) -> list[AllocationInput]:
    """Team plus investors, 10000 tokens in total."""
    return [team_allocation, investor_allocation]


@pytest.fixture
def sample_project(sample_allocations: list[AllocationInput]) -> ProjectInput:
    """Project with market data over the sample allocations."""
    return ProjectInput(
        name="Sample",
        symbol="SMP",
        coingecko_id="sample",
        current_price=2.0,
        market_cap=10000.0,
        circulating_supply=5000,
        total_supply=10000,
        source=DataSource.MANUAL,
        allocations=sample_allocations,
    )


@pytest.fixture
def arbitrum_file_data() -> dict[str, Any]:
    """Manual allocation file contents for ARB (percent-based)."""
    return {
        "token": "arbitrum",
        "name": "Arbitrum",
        "symbol": "arb",
        "total_supply": 10_000_000_000,
        "circulating_supply": 3_475_000_000,
        "current_price": 1.2,
        "tge_date": "2023-03-23",
        "allocations": [
            {
                "category": "Team",
                "percentage": 26.94,
                "cliff_months": 12,
                "vesting_months": 36,
                "vesting_type": "linear",
            },
            {
                "category": "Investors",
                "percentage": 17.53,
                "vesting": "1 year cliff, 3 years linear vesting",
            },
            {
                "category": "Airdrop",
                "percentage": 11.62,
                "vesting": "100% unlocked at TGE",
            },
            {
                "category": "DAO Treasury",
                "percentage": 42.78,
            },
            {
                "category": "Foundation",
                "percentage": 1.13,
                "tgePercent": 100,
            },
        ],
    }


@pytest.fixture
def allocations_dir(tmp_path: Path, arbitrum_file_data: dict[str, Any]) -> Path:
    """Directory holding an arbitrum.yaml allocation file."""
    directory = tmp_path / "allocations"
    directory.mkdir()
    with open(directory / "arbitrum.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(arbitrum_file_data, f)
    return directory


@pytest.fixture
def mock_markets_response() -> list[dict[str, Any]]:
    """Mock CoinGecko /coins/markets response for ARB."""
    return [
        {
            "id": "arbitrum",
            "symbol": "arb",
            "name": "Arbitrum",
            "image": "https://assets.coingecko.com/coins/images/16547/large/arb.jpg",
            "current_price": 0.8,
            "market_cap": 3_200_000_000,
            "circulating_supply": 4_000_000_000,
            "total_supply": 10_000_000_000,
            "max_supply": 10_000_000_000,
        }
    ]
