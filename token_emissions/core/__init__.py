"""Core module - data models, types, configuration and exceptions."""

from .models import (
    AllocationInput,
    AllocationSchedule,
    CliffEvent,
    ProjectEmissions,
    ProjectAnalytics,
    ProjectMeta,
    MarketSnapshot,
    ProjectInput,
    AllocationFile,
    ComparisonRow,
    InflationPeriodRow,
    MarketEmissionsRow,
    VestingTerms,
    AuditEntry,
    ProjectReport,
    BatchResult,
)
from .types import (
    VestingType,
    StandardGroup,
    DataSource,
)
from .exceptions import (
    EmissionsToolError,
    ProjectNotFoundError,
    DataSourceError,
    RateLimitError,
    ConfigurationError,
    AllocationFileError,
)
from .config import EngineConfig, get_config, reload_config

__all__ = [
    # Models
    "AllocationInput",
    "AllocationSchedule",
    "CliffEvent",
    "ProjectEmissions",
    "ProjectAnalytics",
    "ProjectMeta",
    "MarketSnapshot",
    "ProjectInput",
    "AllocationFile",
    "ComparisonRow",
    "InflationPeriodRow",
    "MarketEmissionsRow",
    "VestingTerms",
    "AuditEntry",
    "ProjectReport",
    "BatchResult",
    # Types
    "VestingType",
    "StandardGroup",
    "DataSource",
    # Exceptions
    "EmissionsToolError",
    "ProjectNotFoundError",
    "DataSourceError",
    "RateLimitError",
    "ConfigurationError",
    "AllocationFileError",
    # Config
    "EngineConfig",
    "get_config",
    "reload_config",
]
