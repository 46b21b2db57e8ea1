"""Configuration management for the shoal data core."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_FUNDING_URL = "https://api.withblake.ai/funding"
DEFAULT_LISTINGS_URL = "https://api.withblake.ai/listings"
DEFAULT_PARITY_URL = "https://api.withblake.ai/parity"


@dataclass
class ApiConfig:
    """Upstream API endpoints and credentials."""

    funding_url: str = DEFAULT_FUNDING_URL
    listings_url: str = DEFAULT_LISTINGS_URL
    parity_url: str = DEFAULT_PARITY_URL
    api_key: str | None = None
    timeout: float = 30.0


@dataclass
class DashboardConfig:
    """Behaviour of the dashboard service."""

    environment: str = "production"
    default_base_exchange: str = "all"
    fallback_to_samples: bool = False
    funding_trend_days: int = 7
    listing_trend_days: tuple[int, int] = (30, 90)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def __post_init__(self) -> None:
        self.listing_trend_days = tuple(self.listing_trend_days)  # type: ignore[assignment]


@dataclass
class SnapshotConfig:
    """Daily snapshot store settings."""

    enabled: bool = False
    database: str = str(Path.home() / ".shoal" / "snapshots.duckdb")
    retention_days: int = 120


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class ShoalConfig:
    """Top level configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    snapshots: SnapshotConfig = field(default_factory=SnapshotConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ShoalConfig":
        """Build a configuration from a nested dictionary."""
        return cls(
            api=ApiConfig(**config_dict.get("api", {})),
            dashboard=DashboardConfig(**config_dict.get("dashboard", {})),
            snapshots=SnapshotConfig(**config_dict.get("snapshots", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        dashboard = asdict(self.dashboard)
        dashboard["listing_trend_days"] = list(self.dashboard.listing_trend_days)
        api = {k: v for k, v in asdict(self.api).items() if v is not None}
        logging_section = {k: v for k, v in asdict(self.logging).items() if v is not None}
        return {
            "api": api,
            "dashboard": dashboard,
            "snapshots": asdict(self.snapshots),
            "logging": logging_section,
        }


class ConfigManager:
    """Loads, updates and saves the TOML configuration file."""

    def __init__(self, config_path: Path | None = None, *, use_env: bool = True):
        """Initialise the manager.

        Args:
            config_path: path to the config file, defaults to ``~/.shoal/config.toml``
            use_env: overlay environment variables on top of the file
        """
        self.config_path = config_path or Path.home() / ".shoal" / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> ShoalConfig:
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning("Failed to load config from {}: {}", self.config_path, e)
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())
        return ShoalConfig.from_dict(config_dict)

    def get_config(self) -> ShoalConfig:
        """Return the active configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Apply nested updates, e.g. ``update_config(api={"api_key": "k"})``."""
        config_dict = self.config.to_dict()
        _deep_update(config_dict, updates)
        self.config = ShoalConfig.from_dict(config_dict)

    def save_config(self) -> None:
        """Write the configuration back to disk."""
        import tomli_w

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "wb") as f:
                tomli_w.dump(self.config.to_dict(), f)
        except OSError as e:
            logger.warning("Failed to save config to {}: {}", self.config_path, e)


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


def get_default_config() -> ShoalConfig:
    """Return a configuration with every default applied."""
    return ShoalConfig()


def load_config_from_env() -> dict[str, Any]:
    """Read configuration overrides from environment variables."""
    config: dict[str, Any] = {}

    api_config: dict[str, Any] = {}
    if os.getenv("BLAKE_API_URL"):
        api_config["funding_url"] = os.getenv("BLAKE_API_URL")
    if os.getenv("BLAKE_LISTINGS_URL"):
        api_config["listings_url"] = os.getenv("BLAKE_LISTINGS_URL")
    if os.getenv("BLAKE_PARITY_URL"):
        api_config["parity_url"] = os.getenv("BLAKE_PARITY_URL")
    if os.getenv("BLAKE_API_KEY"):
        api_config["api_key"] = os.getenv("BLAKE_API_KEY")
    blake_api_timeout = os.getenv("BLAKE_API_TIMEOUT")
    if blake_api_timeout is not None:
        api_config["timeout"] = float(blake_api_timeout)
    if api_config:
        config["api"] = api_config

    dashboard_config: dict[str, Any] = {}
    shoal_env = os.getenv("SHOAL_ENV")
    if shoal_env is not None:
        dashboard_config["environment"] = shoal_env
        dashboard_config["fallback_to_samples"] = shoal_env.lower() == "development"
    if os.getenv("SHOAL_BASE_EXCHANGE"):
        dashboard_config["default_base_exchange"] = os.getenv("SHOAL_BASE_EXCHANGE")
    if dashboard_config:
        config["dashboard"] = dashboard_config

    snapshot_config: dict[str, Any] = {}
    if os.getenv("SHOAL_SNAPSHOT_DB"):
        snapshot_config["database"] = os.getenv("SHOAL_SNAPSHOT_DB")
        snapshot_config["enabled"] = True
    shoal_snapshot_retention = os.getenv("SHOAL_SNAPSHOT_RETENTION_DAYS")
    if shoal_snapshot_retention is not None:
        snapshot_config["retention_days"] = int(shoal_snapshot_retention)
    if snapshot_config:
        config["snapshots"] = snapshot_config

    logging_config: dict[str, Any] = {}
    if os.getenv("SHOAL_LOGGING_LEVEL"):
        logging_config["level"] = os.getenv("SHOAL_LOGGING_LEVEL")
    if os.getenv("SHOAL_LOGGING_FILE"):
        logging_config["file"] = os.getenv("SHOAL_LOGGING_FILE")
    if logging_config:
        config["logging"] = logging_config

    return config
