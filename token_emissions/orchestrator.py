"""Orchestrator for emissions analysis across one or many projects.

Resolves each project's inputs from the collaborators (manual allocation
files, live market data), runs the pure engine stages, and assembles the
comparison read models. Market lookups for a watch list run in parallel; a
project whose inputs cannot be resolved is listed as missing instead of
failing the batch.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Sequence

from .calculator.aggregator import Aggregator
from .calculator.analytics import AnalyticsDeriver
from .comparison.engine import ComparisonEngine
from .core.config import EngineConfig, get_config
from .core.exceptions import EmissionsToolError, ProjectNotFoundError
from .core.models import (
    AllocationFile,
    AuditEntry,
    BatchResult,
    MarketSnapshot,
    ProjectInput,
    ProjectReport,
)
from .core.types import DataSource
from .providers.allocations.manual_alloc import ManualAllocationProvider
from .providers.market.coingecko_market import CoinGeckoMarketProvider

logger = logging.getLogger(__name__)


def snapshot_from_file(allocation_file: AllocationFile) -> MarketSnapshot | None:
    """
    Market figures recorded in an allocation file, if it carries any.

    Total supply falls back to the sum of allocated tokens.
    """
    if allocation_file.current_price is None and allocation_file.circulating_supply is None:
        return None

    total_supply = allocation_file.total_supply or sum(
        a.total_tokens for a in allocation_file.allocations
    )
    price = allocation_file.current_price or 0.0
    circulating = allocation_file.circulating_supply or 0.0

    return MarketSnapshot(
        name=allocation_file.name or allocation_file.token,
        symbol=(allocation_file.symbol or "").upper(),
        coingecko_id=allocation_file.token,
        current_price=price,
        market_cap=circulating * price,
        circulating_supply=circulating,
        total_supply=total_supply,
        source=DataSource.MANUAL,
    )


class EmissionsOrchestrator:
    """Coordinates providers and engine stages for emissions analysis."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        market_provider: CoinGeckoMarketProvider | None = None,
        allocation_provider: ManualAllocationProvider | None = None,
        data_directory: Path | str | None = None,
        offline: bool = False,
    ):
        """
        Initialize the orchestrator with its providers.

        Args:
            config: Engine configuration (global config if not provided)
            market_provider: Market data provider (CoinGecko if not provided)
            allocation_provider: Allocation file provider
            data_directory: Directory of manual allocation files, used when
                allocation_provider is not given
            offline: Skip live market data and rely on allocation files only
        """
        self.config = config or get_config()

        if offline:
            self.market_provider = None
        else:
            self.market_provider = market_provider or CoinGeckoMarketProvider(
                api_key=self.config.coingecko_api_key
            )
        self.allocation_provider = allocation_provider or ManualAllocationProvider(
            data_directory=data_directory
        )

        self.aggregator = Aggregator()
        self.deriver = AnalyticsDeriver(self.aggregator)
        self.comparison = ComparisonEngine(self.aggregator, self.deriver)

    def _providers(self) -> list:
        return [p for p in (self.market_provider, self.allocation_provider) if p is not None]

    def _collect_audit_trail(self) -> list[AuditEntry]:
        """Collect and clear audit entries from all providers."""
        entries: list[AuditEntry] = []
        for provider in self._providers():
            entries.extend(provider.get_audit_trail())
            provider.clear_audit_trail()
        return sorted(entries, key=lambda e: e.timestamp)

    def resolve_project(self, token: str) -> tuple[ProjectInput, date | None]:
        """
        Resolve a token's allocations and market data.

        Args:
            token: CoinGecko ID (also the allocation file name)

        Returns:
            Tuple of (ProjectInput, TGE date if the file records one)

        Raises:
            ProjectNotFoundError: If allocations or market data are unavailable
            DataSourceError: If the market data request fails
            AllocationFileError: If the allocation file is malformed
        """
        snapshot = None
        if self.market_provider is not None:
            snapshot = self.market_provider.get_snapshot(token)

        allocation_file = self.allocation_provider.get_file(
            token,
            default_supply=snapshot.total_supply if snapshot else None,
        )
        if allocation_file is None:
            raise ProjectNotFoundError(token, ["manual allocations"])

        if snapshot is None:
            snapshot = snapshot_from_file(allocation_file)
        if snapshot is None:
            raise ProjectNotFoundError(token, [p.SOURCE.value for p in self._providers()])

        project = ProjectInput(
            **snapshot.model_dump(),
            allocations=allocation_file.allocations,
        )
        return project, allocation_file.tge_date

    def build_report(
        self,
        project: ProjectInput,
        months: int | None = None,
        tge_date: date | None = None,
    ) -> ProjectReport:
        """
        Run the engine stages for one resolved project.

        Args:
            project: Project with market data and normalized allocations
            months: Analysis window (configured default if None)
            tge_date: Optional TGE date for month labels

        Returns:
            ProjectReport with emissions, analytics and comparison row
        """
        months = self.config.resolve_months(months)

        emissions = self.aggregator.aggregate(project.allocations, months, tge_date)
        analytics = self.deriver.derive(
            emissions,
            project.current_price,
            project.circulating_supply,
            project.total_supply,
        )

        return ProjectReport(
            project=project,
            emissions=emissions,
            analytics=analytics,
            comparison=self.comparison.build_row(project, analytics),
        )

    def analyze(self, token: str, months: int | None = None) -> ProjectReport:
        """
        Analyze a single token.

        Args:
            token: CoinGecko ID
            months: Analysis window (configured default if None)

        Returns:
            ProjectReport
        """
        logger.info(f"Starting emissions analysis for: {token}")
        project, tge_date = self.resolve_project(token)
        report = self.build_report(project, months, tge_date)
        logger.info(f"Analysis complete for {project.symbol or token}")
        return report

    def analyze_batch(
        self,
        tokens: Sequence[str],
        months: int | None = None,
        rank_by: str | None = None,
    ) -> BatchResult:
        """
        Analyze a watch list of tokens.

        Project inputs are resolved in parallel. Tokens that fail to resolve
        are reported in BatchResult.missing and do not abort the batch.

        Args:
            tokens: CoinGecko IDs, in display order
            months: Analysis window (configured default if None)
            rank_by: Optional ComparisonRow field to sort comparison rows on

        Returns:
            BatchResult
        """
        months = self.config.resolve_months(months)
        logger.info(f"Analyzing {len(tokens)} tokens over {months} months")

        resolved: list[tuple[ProjectInput, date | None]] = []
        missing: list[str] = []

        workers = max(1, min(self.config.batch_workers, len(tokens) or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(token, pool.submit(self.resolve_project, token)) for token in tokens]

            for token, future in futures:
                try:
                    resolved.append(future.result())
                except EmissionsToolError as e:
                    logger.warning(f"Skipping {token}: {e}")
                    missing.append(token)

        reports = [self.build_report(project, months, tge) for project, tge in resolved]

        comparison = [r.comparison for r in reports]
        if rank_by:
            comparison = self.comparison.rank(comparison, rank_by)

        inflation_periods = self.comparison.inflation_periods(
            [(r.project, r.emissions.monthly_inflation_rate) for r in reports]
        )
        market_emissions = self.comparison.market_emissions(
            [(r.emissions, r.project.current_price) for r in reports],
            months,
        )

        logger.info(f"Batch complete: {len(reports)} analyzed, {len(missing)} missing")

        return BatchResult(
            months=months,
            reports=reports,
            missing=missing,
            comparison=comparison,
            inflation_periods=inflation_periods,
            market_emissions=market_emissions,
            audit_trail=self._collect_audit_trail(),
        )
