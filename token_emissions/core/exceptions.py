"""Exceptions raised by the collaborators around the engine.

The engine itself never raises for degenerate numeric input; these errors
cover market data, allocation files and configuration.
"""

from typing import Any


class EmissionsToolError(Exception):
    """Base exception; `details` carries machine-readable context."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProjectNotFoundError(EmissionsToolError):
    """No source could provide data for a token."""

    def __init__(self, token_identifier: str, sources_checked: list[str] | None = None):
        self.token_identifier = token_identifier
        self.sources_checked = sources_checked or []
        checked = f" (checked: {', '.join(self.sources_checked)})" if self.sources_checked else ""
        super().__init__(
            f"No data for {token_identifier}{checked}",
            {"token": token_identifier, "sources": self.sources_checked},
        )


class DataSourceError(EmissionsToolError):
    """A data source failed or returned something unusable."""

    def __init__(
        self,
        source: str,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(
            f"[{source}] {message}",
            {"source": source, "endpoint": endpoint, "status_code": status_code},
        )


class RateLimitError(DataSourceError):
    """HTTP 429 from a data source."""

    def __init__(
        self,
        source: str,
        retry_after_seconds: int | None = None,
        endpoint: str | None = None,
    ):
        self.retry_after_seconds = retry_after_seconds
        hint = f", retry after {retry_after_seconds}s" if retry_after_seconds else ""
        super().__init__(source, f"Rate limit exceeded{hint}", endpoint=endpoint, status_code=429)


class ConfigurationError(EmissionsToolError):
    """An environment setting is missing or malformed."""

    def __init__(self, config_key: str, message: str):
        self.config_key = config_key
        super().__init__(f"Configuration error [{config_key}]: {message}", {"config_key": config_key})


class AllocationFileError(EmissionsToolError):
    """A manual allocation file cannot be read or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Invalid allocation file {path}: {message}", {"path": path})
