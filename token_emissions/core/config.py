"""Configuration management for engine defaults and provider settings.

Loads configuration from environment variables or a .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MONTHS = 60
MAX_MONTHS = 120
DEFAULT_BATCH_WORKERS = 8


def _int_from_env(key: str, default: int) -> int:
    """Read a positive integer from the environment."""
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(key, f"expected an integer, got {raw!r}")
    if value < 1:
        raise ConfigurationError(key, f"must be >= 1, got {value}")
    return value


@dataclass
class EngineConfig:
    """Engine defaults and provider credentials."""

    # Analysis window used when callers do not pass one
    default_months: int = DEFAULT_MONTHS

    # Hard cap on the analysis window
    max_months: int = MAX_MONTHS

    # Thread pool size for batch market-data fetches
    batch_workers: int = DEFAULT_BATCH_WORKERS

    # CoinGecko (optional - public API works without key)
    coingecko_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        config = cls(
            default_months=_int_from_env("EMISSIONS_DEFAULT_MONTHS", DEFAULT_MONTHS),
            max_months=_int_from_env("EMISSIONS_MAX_MONTHS", MAX_MONTHS),
            batch_workers=_int_from_env("EMISSIONS_BATCH_WORKERS", DEFAULT_BATCH_WORKERS),
            coingecko_api_key=os.getenv("COINGECKO_API_KEY"),
        )
        if config.default_months > config.max_months:
            raise ConfigurationError(
                "EMISSIONS_DEFAULT_MONTHS",
                f"default window {config.default_months} exceeds max {config.max_months}",
            )
        return config

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "EngineConfig":
        """
        Load configuration from .env file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the project root.

        Returns:
            EngineConfig instance with loaded values
        """
        if env_file:
            load_dotenv(env_file)
        else:
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls.from_env()

    def has_coingecko_key(self) -> bool:
        """Check if a CoinGecko pro API key is configured."""
        return bool(self.coingecko_api_key)

    def resolve_months(self, months: int | None = None) -> int:
        """
        Resolve a caller-supplied window length.

        None means the configured default; anything outside [1, max_months]
        is clamped rather than rejected.
        """
        if months is None:
            return self.default_months
        if months < 1:
            logger.warning(f"Window of {months} months clamped to 1")
            return 1
        if months > self.max_months:
            logger.warning(f"Window of {months} months clamped to {self.max_months}")
            return self.max_months
        return months


# Global config instance (lazy loaded)
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = EngineConfig.load()
    return _config


def reload_config(env_file: Optional[Path] = None) -> EngineConfig:
    """Reload configuration from environment."""
    global _config
    _config = EngineConfig.load(env_file)
    return _config
