"""Tests for configuration loading, environment overlays and persistence."""

from pathlib import Path

import pytest
import tomllib

from shoal.core.config import (
    ApiConfig,
    ConfigManager,
    DashboardConfig,
    ShoalConfig,
    get_default_config,
    load_config_from_env,
)
from shoal.core.config.settings import DEFAULT_FUNDING_URL

_ENV_KEYS = (
    "BLAKE_API_URL",
    "BLAKE_LISTINGS_URL",
    "BLAKE_PARITY_URL",
    "BLAKE_API_KEY",
    "BLAKE_API_TIMEOUT",
    "SHOAL_ENV",
    "SHOAL_BASE_EXCHANGE",
    "SHOAL_SNAPSHOT_DB",
    "SHOAL_SNAPSHOT_RETENTION_DAYS",
    "SHOAL_LOGGING_LEVEL",
    "SHOAL_LOGGING_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    """Default configuration values."""

    def test_default_config(self):
        config = get_default_config()

        assert config.api.funding_url == DEFAULT_FUNDING_URL
        assert config.api.api_key is None
        assert config.api.timeout == 30.0
        assert config.dashboard.default_base_exchange == "all"
        assert config.dashboard.fallback_to_samples is False
        assert config.dashboard.listing_trend_days == (30, 90)
        assert config.snapshots.enabled is False
        assert config.snapshots.retention_days == 120
        assert config.logging.level == "INFO"

    def test_is_development(self):
        assert DashboardConfig(environment="Development").is_development
        assert not DashboardConfig().is_development


class TestEnvironment:
    """Environment variable overlays."""

    def test_empty_environment(self):
        assert load_config_from_env() == {}

    def test_api_variables(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BLAKE_API_URL", "https://blake.test/funding")
        monkeypatch.setenv("BLAKE_API_KEY", "secret")
        monkeypatch.setenv("BLAKE_API_TIMEOUT", "5")

        config = load_config_from_env()

        assert config["api"] == {
            "funding_url": "https://blake.test/funding",
            "api_key": "secret",
            "timeout": 5.0,
        }

    def test_development_enables_sample_fallback(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SHOAL_ENV", "development")
        monkeypatch.setenv("SHOAL_BASE_EXCHANGE", "binance")

        config = load_config_from_env()

        assert config["dashboard"] == {
            "environment": "development",
            "fallback_to_samples": True,
            "default_base_exchange": "binance",
        }

    def test_snapshot_database_enables_store(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("SHOAL_SNAPSHOT_DB", str(tmp_path / "snap.duckdb"))
        monkeypatch.setenv("SHOAL_SNAPSHOT_RETENTION_DAYS", "30")

        config = load_config_from_env()

        assert config["snapshots"]["enabled"] is True
        assert config["snapshots"]["retention_days"] == 30


class TestConfigManager:
    """File loading, updates and saving."""

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "missing.toml")

        assert manager.get_config() == get_default_config()

    def test_loads_file_and_overlays_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "config.toml"
        path.write_text('[api]\napi_key = "from-file"\ntimeout = 10.0\n\n[dashboard]\nfunding_trend_days = 14\n')
        monkeypatch.setenv("BLAKE_API_KEY", "from-env")

        config = ConfigManager(path).config

        assert config.api.api_key == "from-env"
        assert config.api.timeout == 10.0
        assert config.dashboard.funding_trend_days == 14

    def test_environment_can_be_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BLAKE_API_KEY", "from-env")

        config = ConfigManager(tmp_path / "missing.toml", use_env=False).config

        assert config.api.api_key is None

    def test_invalid_file_falls_back_to_defaults(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("not = [valid")

        assert ConfigManager(path).config == get_default_config()

    def test_update_and_save_round_trip(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.toml"
        manager = ConfigManager(path)

        manager.update_config(api={"api_key": "k"}, snapshots={"enabled": True})
        manager.save_config()

        with open(path, "rb") as f:
            saved = tomllib.load(f)
        assert saved["api"]["api_key"] == "k"
        assert saved["snapshots"]["enabled"] is True
        assert saved["dashboard"]["listing_trend_days"] == [30, 90]
        assert "file" not in saved["logging"]
        assert ConfigManager(path).config == manager.config


def test_from_dict_accepts_partial_sections():
    config = ShoalConfig.from_dict({"api": {"api_key": "k"}, "dashboard": {"listing_trend_days": [7, 14]}})

    assert config.api == ApiConfig(api_key="k")
    assert config.dashboard.listing_trend_days == (7, 14)
