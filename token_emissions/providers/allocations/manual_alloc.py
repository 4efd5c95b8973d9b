"""Manual allocation provider for analyst-maintained files.

Allocation parameters live upstream of the engine. This provider reads them
from YAML/JSON files, one per token, and normalizes every record:

    token: arbitrum
    total_supply: 10000000000
    tge_date: 2023-03-23
    allocations:
      - category: Team
        percentage: 26.94
        cliff_months: 12
        vesting_months: 36
        vesting_type: linear
      - category: Airdrop
        percentage: 11.62
        vesting: "100% unlocked at TGE"
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from ...core.exceptions import AllocationFileError
from ...core.models import AllocationFile, AllocationInput
from ...core.types import DataSource
from ...normalizer.normalizer import InputNormalizer, coerce_number
from ..base import BaseProvider

logger = logging.getLogger(__name__)

FILE_SUFFIXES = (".yaml", ".yml", ".json")


def _parse_date(value: Any) -> date | None:
    """Accept YAML dates, datetimes and ISO strings."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Ignoring unparseable tge_date: {value!r}")
        return None


def _optional_number(value: Any) -> float | None:
    return coerce_number(value) if value is not None else None


def _optional_text(value: Any, field: str) -> str | None:
    # YAML 1.1 reads bare tickers like ON or NO as booleans
    if value is None:
        return None
    if isinstance(value, bool):
        logger.warning(f"Ignoring boolean {field} {value!r}; quote the value in the file")
        return None
    return str(value)


class ManualAllocationProvider(BaseProvider):
    """Loads allocation data from manual YAML/JSON files."""

    SOURCE = DataSource.MANUAL

    def __init__(
        self,
        data_directory: Path | str | None = None,
        normalizer: InputNormalizer | None = None,
    ):
        """
        Initialize manual allocation provider.

        Args:
            data_directory: Directory containing manual allocation files.
                Files should be named {token_id}.yaml or {token_id}.json
            normalizer: Normalizer applied to every allocation record
        """
        super().__init__()
        self.data_directory = Path(data_directory) if data_directory else None
        self.normalizer = normalizer or InputNormalizer()

    def is_available(self) -> bool:
        """Check if data directory exists and is readable."""
        if self.data_directory is None:
            return False
        return self.data_directory.exists() and self.data_directory.is_dir()

    def find_allocation_file(self, token_id: str) -> Path | None:
        """Find allocation file for a token."""
        if not self.data_directory:
            return None

        for name in (token_id, token_id.lower(), token_id.upper()):
            for suffix in FILE_SUFFIXES:
                filepath = self.data_directory / f"{name}{suffix}"
                if filepath.exists():
                    return filepath

        return None

    def _read(self, filepath: Path) -> dict[str, Any]:
        """Read a YAML or JSON file into a dict."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                if filepath.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except OSError as e:
            raise AllocationFileError(str(filepath), str(e))
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise AllocationFileError(str(filepath), f"parse error: {e}")

        # A bare list is accepted as the allocations section
        if isinstance(data, list):
            data = {"allocations": data}
        if not isinstance(data, dict):
            raise AllocationFileError(str(filepath), "expected a mapping at top level")
        if not isinstance(data.get("allocations", []), list):
            raise AllocationFileError(str(filepath), "'allocations' must be a list")

        return data

    def load_path(
        self,
        filepath: Path | str,
        default_supply: float | None = None,
    ) -> AllocationFile:
        """
        Load and normalize one allocation file.

        Args:
            filepath: Path to a .yaml, .yml or .json file
            default_supply: Supply used for percent-only records when the
                file does not record its own total_supply

        Returns:
            AllocationFile with normalized allocations

        Raises:
            AllocationFileError: If the file cannot be read or parsed
        """
        filepath = Path(filepath)
        data = self._read(filepath)

        file_supply = _optional_number(data.get("total_supply"))
        supply = file_supply if file_supply else default_supply

        records = [r for r in data.get("allocations", []) if isinstance(r, dict)]
        allocations = self.normalizer.normalize_many(records, supply)

        allocation_file = AllocationFile(
            token=str(data.get("token") or filepath.stem),
            name=_optional_text(data.get("name"), "name"),
            symbol=_optional_text(data.get("symbol"), "symbol"),
            total_supply=file_supply,
            circulating_supply=_optional_number(data.get("circulating_supply")),
            current_price=_optional_number(data.get("current_price")),
            tge_date=_parse_date(data.get("tge_date")),
            allocations=allocations,
            path=str(filepath),
        )

        self._record_audit(
            action="load",
            endpoint=str(filepath),
            success=True,
            notes=f"Loaded {len(allocations)} allocations",
        )
        logger.info(f"Loaded {len(allocations)} manual allocations from {filepath}")

        return allocation_file

    def get_file(
        self,
        token_id: str,
        default_supply: float | None = None,
    ) -> AllocationFile | None:
        """Load the allocation file for a token, or None if there is none."""
        filepath = self.find_allocation_file(token_id)

        if not filepath:
            logger.debug(f"No manual allocation file found for {token_id}")
            return None

        return self.load_path(filepath, default_supply)

    def get_allocations(
        self,
        token_id: str,
        default_supply: float | None = None,
    ) -> list[AllocationInput]:
        """
        Load normalized allocations for a token.

        Args:
            token_id: Token identifier (CoinGecko ID or symbol)
            default_supply: Supply used for percent-only records

        Returns:
            List of AllocationInput, empty if no file exists
        """
        allocation_file = self.get_file(token_id, default_supply)
        return allocation_file.allocations if allocation_file else []
