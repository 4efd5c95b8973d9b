"""Tests for configuration loading."""

import pytest

from token_emissions.core.config import (
    DEFAULT_BATCH_WORKERS,
    DEFAULT_MONTHS,
    MAX_MONTHS,
    EngineConfig,
    get_config,
    reload_config,
)
from token_emissions.core.exceptions import ConfigurationError

ENV_KEYS = (
    "EMISSIONS_DEFAULT_MONTHS",
    "EMISSIONS_MAX_MONTHS",
    "EMISSIONS_BATCH_WORKERS",
    "COINGECKO_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset config variables and remove anything a test loads into them."""
    for key in ENV_KEYS:
        # setenv first so teardown removes values written by load_dotenv
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self, clean_env):
        """Test values when nothing is configured."""
        config = EngineConfig.from_env()

        assert config.default_months == DEFAULT_MONTHS
        assert config.max_months == MAX_MONTHS
        assert config.batch_workers == DEFAULT_BATCH_WORKERS
        assert not config.has_coingecko_key()

    def test_from_env(self, clean_env):
        """Test values read from the environment."""
        clean_env.setenv("EMISSIONS_DEFAULT_MONTHS", "36")
        clean_env.setenv("EMISSIONS_BATCH_WORKERS", "2")
        clean_env.setenv("COINGECKO_API_KEY", "key")

        config = EngineConfig.from_env()

        assert config.default_months == 36
        assert config.batch_workers == 2
        assert config.has_coingecko_key()

    @pytest.mark.parametrize("value", ["abc", "0", "-4"])
    def test_invalid_integer(self, clean_env, value):
        """Test that non-integer or non-positive values are rejected."""
        clean_env.setenv("EMISSIONS_MAX_MONTHS", value)

        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_env()

        assert exc_info.value.config_key == "EMISSIONS_MAX_MONTHS"

    def test_default_above_max(self, clean_env):
        """Test that the default window may not exceed the cap."""
        clean_env.setenv("EMISSIONS_DEFAULT_MONTHS", "200")

        with pytest.raises(ConfigurationError):
            EngineConfig.from_env()

    def test_load_env_file(self, clean_env, tmp_path):
        """Test loading from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("EMISSIONS_BATCH_WORKERS=3\n")

        config = EngineConfig.load(env_file)

        assert config.batch_workers == 3

    def test_reload_config(self, clean_env, tmp_path):
        """Test that reload replaces the global instance."""
        clean_env.setattr("token_emissions.core.config._config", None)
        env_file = tmp_path / ".env"
        env_file.write_text("EMISSIONS_DEFAULT_MONTHS=48\n")

        config = reload_config(env_file)

        assert config.default_months == 48
        assert get_config() is config


class TestResolveMonths:
    """Tests for window resolution."""

    @pytest.fixture
    def config(self) -> EngineConfig:
        return EngineConfig(default_months=60, max_months=120)

    def test_default(self, config):
        """Test that None means the configured default."""
        assert config.resolve_months(None) == 60

    def test_within_bounds(self, config):
        """Test that valid windows pass through."""
        assert config.resolve_months(1) == 1
        assert config.resolve_months(48) == 48
        assert config.resolve_months(120) == 120

    def test_clamped(self, config):
        """Test that out-of-range windows are clamped."""
        assert config.resolve_months(0) == 1
        assert config.resolve_months(-12) == 1
        assert config.resolve_months(500) == 120
