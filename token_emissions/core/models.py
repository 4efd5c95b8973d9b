"""Pydantic data models for the emissions engine.

All records are immutable (frozen) after creation. The engine builds new
records on every call and never mutates one in place.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from .types import (
    DataSource,
    Percentage,
    StandardGroup,
    TokenAmount,
    USDAmount,
    VestingType,
)


class AllocationInput(BaseModel):
    """One token-holder category with its vesting parameters."""

    category: str
    standard_group: StandardGroup | None = None
    total_tokens: TokenAmount = Field(0.0, ge=0, allow_inf_nan=False)
    tge_percent: Percentage = Field(0.0, ge=0, le=100, description="Share released at month 0")
    cliff_months: int = Field(0, ge=0)
    vesting_months: int = Field(0, ge=0)
    vesting_type: VestingType = VestingType.LINEAR
    percentage: Percentage | None = Field(None, ge=0, le=100, description="Share of total supply")

    model_config = {"frozen": True}


class AllocationSchedule(BaseModel):
    """An allocation together with its computed monthly release series."""

    category: str
    standard_group: StandardGroup = StandardGroup.COMMUNITY
    percentage: Percentage = 0.0
    total_tokens: TokenAmount = 0.0
    vesting_type: VestingType = VestingType.LINEAR
    cliff_months: int = 0
    vesting_months: int = 0
    tge_percent: Percentage = 0.0
    monthly_emissions: list[int] = Field(default_factory=list)
    cumulative_supply: list[int] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_cliff_release(self) -> bool:
        """Whether the post-TGE remainder unlocks as a cliff rather than linearly."""
        return self.vesting_type == VestingType.CLIFF or (
            self.cliff_months > 0 and self.vesting_type != VestingType.LINEAR
        )

    @property
    def is_linear_release(self) -> bool:
        """Whether the post-TGE remainder counts as linear release."""
        return self.vesting_type == VestingType.LINEAR or self.vesting_months > 0


class CliffEvent(BaseModel):
    """A discrete cliff unlock inside the analysis window."""

    month_index: int
    label: str
    amount: int
    month_label: str | None = None  # "YYYY-MM" when a TGE date is known

    model_config = {"frozen": True}


class ProjectEmissions(BaseModel):
    """Aggregate emission series for all of a project's allocations."""

    months: int
    total_monthly_emissions: list[int] = Field(default_factory=list)
    total_cumulative_supply: list[int] = Field(default_factory=list)
    monthly_inflation_rate: list[float] = Field(default_factory=list)  # month-over-month %
    cliff_events: list[CliffEvent] = Field(default_factory=list)
    allocations: list[AllocationSchedule] = Field(default_factory=list)
    month_labels: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ProjectAnalytics(BaseModel):
    """Derived single-project metrics."""

    unlock_value_per_month: list[USDAmount] = Field(default_factory=list)
    total_unlock_value: USDAmount = 0.0
    cliff_unlock_tokens: TokenAmount = 0.0
    linear_unlock_tokens: TokenAmount = 0.0
    cliff_unlock_pct: Percentage = 0.0
    linear_unlock_pct: Percentage = 0.0
    total_unlock_pct: Percentage = 0.0
    inflation_rate: Percentage = 0.0  # locked / circulating snapshot, not monthly
    circulation_ratio: Percentage = 0.0
    locked_pct: Percentage = 0.0

    model_config = {"frozen": True}


class ProjectMeta(BaseModel):
    """Identification fields shared by every cross-project row."""

    name: str
    symbol: str = ""
    coingecko_id: str = ""
    image: str = ""

    model_config = {"frozen": True}


class MarketSnapshot(ProjectMeta):
    """Current market figures for a token, resolved by a market-data provider."""

    current_price: float = 0.0
    market_cap: USDAmount = 0.0
    circulating_supply: TokenAmount = 0.0
    total_supply: TokenAmount = 0.0  # max supply when known, else total supply
    max_supply: TokenAmount | None = None
    source: DataSource = DataSource.UNKNOWN


class ProjectInput(MarketSnapshot):
    """A project's market snapshot together with its allocation inputs."""

    allocations: list[AllocationInput] = Field(default_factory=list)


class AllocationFile(BaseModel):
    """Contents of a manual allocation file, already normalized."""

    token: str
    name: str | None = None
    symbol: str | None = None
    total_supply: TokenAmount | None = None
    circulating_supply: TokenAmount | None = None
    current_price: float | None = None
    tge_date: date | None = None
    allocations: list[AllocationInput] = Field(default_factory=list)
    path: str | None = None

    model_config = {"frozen": True}


class ComparisonRow(ProjectMeta):
    """One row of the cross-project ranking table."""

    category: str | None = None
    total_unlock_value: USDAmount = 0.0
    cliff_unlock_pct: Percentage = 0.0
    linear_unlock_pct: Percentage = 0.0
    total_unlock_pct: Percentage = 0.0
    inflation_rate: Percentage = 0.0
    circulation_ratio: Percentage = 0.0
    locked_pct: Percentage = 0.0
    market_cap: USDAmount = 0.0
    current_price: float = 0.0
    total_supply: TokenAmount = 0.0
    circulating_supply: TokenAmount = 0.0


class InflationPeriodRow(ProjectMeta):
    """Annualized inflation for the first three years plus the latest month."""

    year1_inflation: Percentage = 0.0
    year2_inflation: Percentage = 0.0
    year3_inflation: Percentage = 0.0
    current_inflation: Percentage = 0.0


class MarketEmissionsRow(BaseModel):
    """Market-wide unlock value for one month index."""

    month_index: int
    total_value_unlock: USDAmount = 0.0
    cliff_value_unlock: USDAmount = 0.0
    linear_value_unlock: USDAmount = 0.0

    model_config = {"frozen": True}


class VestingTerms(BaseModel):
    """Vesting details parsed from a free-text or loosely structured source."""

    tge_percent: Percentage | None = None
    cliff_months: int | None = None
    vesting_months: int | None = None
    vesting_type: VestingType | None = None
    unlock_frequency: str | None = None  # "monthly", "quarterly", etc.
    raw_description: str | None = None

    model_config = {"frozen": True}

    @property
    def has_details(self) -> bool:
        """Check if any vesting details are available."""
        return any(
            [
                self.tge_percent is not None,
                self.cliff_months is not None,
                self.vesting_months is not None,
                self.vesting_type is not None,
            ]
        )


class AuditEntry(BaseModel):
    """Audit trail entry for a data fetch."""

    timestamp: datetime = Field(default_factory=datetime.utcnow)
    source: DataSource
    action: str  # "fetch", "load"
    endpoint: str | None = None
    success: bool = True
    error_message: str | None = None
    duration_ms: int | None = None
    notes: str | None = None

    model_config = {"frozen": True}


class ProjectReport(BaseModel):
    """Everything computed for one project in a single request."""

    project: ProjectInput
    emissions: ProjectEmissions
    analytics: ProjectAnalytics
    comparison: ComparisonRow

    model_config = {"frozen": True}


class BatchResult(BaseModel):
    """Result of analyzing a watch list of tokens."""

    months: int
    reports: list[ProjectReport] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)  # tokens whose data could not be resolved
    comparison: list[ComparisonRow] = Field(default_factory=list)
    inflation_periods: list[InflationPeriodRow] = Field(default_factory=list)
    market_emissions: list[MarketEmissionsRow] = Field(default_factory=list)
    audit_trail: list[AuditEntry] = Field(default_factory=list)
    analysis_timestamp: datetime = Field(default_factory=datetime.utcnow)

    model_config = {"frozen": True}
