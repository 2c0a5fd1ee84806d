"""
Unit Tests for ConfigLoader.

Test Aspects Covered:
    ✅ Business Logic: Config loading, profile merging and env overrides
    ✅ Error Handling: Invalid values, missing files and profiles
    ✅ Security: Secrets come from the environment, not the YAML
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from portfolio_gateway.config.loader import ConfigLoader, deep_merge, load_config
from portfolio_gateway.config.models import GatewayConfig

REPO_ROOT = Path(__file__).resolve().parents[2]


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """
        SCENARIO: Valid YAML configuration file
        EXPECTED: GatewayConfig object created
        """
        # Arrange
        config_content = """
upstream:
  market_base_url: https://market.example.com/api
  timeout_seconds: 5
screening:
  aggressive:
    sectors: [Technology]
    min_assets: 3
server:
  port: 9000
"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(config_content)

        loader = ConfigLoader(base_path=tmp_path, environ={})

        # Act
        config = loader.load("config.yaml")

        # Assert
        assert isinstance(config, GatewayConfig)
        assert config.upstream.market_base_url == "https://market.example.com/api"
        assert config.upstream.timeout_seconds == 5
        assert config.screening.aggressive.sectors == ["Technology"]
        assert config.screening.aggressive.min_assets == 3
        assert config.server.port == 9000

    def test_applies_defaults(self) -> None:
        """
        SCENARIO: Empty config
        EXPECTED: Defaults applied; no timeout unless configured
        """
        # Arrange
        loader = ConfigLoader(environ={})

        # Act
        config = loader.load_from_dict({})

        # Assert
        assert config.upstream.timeout_seconds is None
        assert config.cache_store.backend == "memory"
        assert config.screening.shariah.etf_ticker == "HLAL"
        assert config.screening.shariah.max_holdings == 25
        assert config.screening.aggressive.crypto_sleeve == ["BTC", "ETH", "SOL"]
        assert config.chat.model == "gemini-2.5-flash"

    def test_environment_overrides_secrets(self) -> None:
        """
        SCENARIO: API keys present in the environment and the YAML
        EXPECTED: Environment wins; other YAML values kept
        """
        # Arrange
        loader = ConfigLoader(
            environ={
                "FMP_API_KEY": "fmp-env",
                "GEMINI_API_KEY": "gem-env",
                "CACHE_STORE_URL": "https://db.example.com",
                "NEWS_API_KEY": "",
            }
        )
        config_dict = {
            "upstream": {"market_api_key": "fmp-yaml", "news_api_key": "news-yaml"},
        }

        # Act
        config = loader.load_from_dict(config_dict)

        # Assert
        assert config.upstream.market_api_key == "fmp-env"
        assert config.upstream.news_api_key == "news-yaml"
        assert config.chat.api_key == "gem-env"
        assert config.cache_store.url == "https://db.example.com"

    def test_validates_invalid_config(self, tmp_path: Path) -> None:
        """
        SCENARIO: Config with invalid values
        EXPECTED: ValidationError raised
        """
        # Arrange
        config_content = """
upstream:
  timeout_seconds: 0  # Invalid: must be > 0
cache_store:
  backend: redis
"""
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text(config_content)

        loader = ConfigLoader(base_path=tmp_path, environ={})

        # Act & Assert
        with pytest.raises(ValidationError):
            loader.load("invalid.yaml")

    def test_file_not_found(self, tmp_path: Path) -> None:
        """
        SCENARIO: Config path doesn't exist
        EXPECTED: FileNotFoundError raised
        """
        loader = ConfigLoader(base_path=tmp_path)

        with pytest.raises(FileNotFoundError):
            loader.load("nonexistent.yaml")

    def test_profile_not_found(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("server:\n  port: 8000\n")
        loader = ConfigLoader(base_path=tmp_path, environ={})

        with pytest.raises(FileNotFoundError, match="staging"):
            loader.load("config.yaml", profile="staging")

    def test_deep_merge(self) -> None:
        """
        SCENARIO: Two configs merged together
        EXPECTED: Overlay values override base values, nested keys kept
        """
        # Arrange
        base = {"screening": {"shariah": {"etf_ticker": "HLAL", "max_holdings": 25}}}
        overlay = {"screening": {"shariah": {"max_holdings": 10}}}

        # Act
        merged = deep_merge(base, overlay)

        # Assert
        assert merged["screening"]["shariah"]["etf_ticker"] == "HLAL"
        assert merged["screening"]["shariah"]["max_holdings"] == 10


class TestShippedConfig:
    """Test cases for the config files in the repository."""

    def test_default_config_loads(self) -> None:
        config = ConfigLoader(base_path=REPO_ROOT, environ={}).load("config/default.yaml")

        assert config.screening.aggressive.cache_key == "template-assets-aggressive"
        assert config.screening.shariah.cache_key == "template-assets-shariah"
        assert config.cache_store.table == "api_cache"

    def test_production_profile_overlay(self) -> None:
        """
        SCENARIO: Default config with the production profile
        EXPECTED: REST cache backend and a bounded upstream timeout
        """
        config = load_config("config/default.yaml", profile="production", base_path=REPO_ROOT)

        assert config.cache_store.backend == "rest"
        assert config.upstream.timeout_seconds == 15
        assert config.server.port == 8000
