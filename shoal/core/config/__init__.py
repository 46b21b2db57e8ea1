"""Configuration management module."""

from shoal.core.config.settings import (
    ApiConfig,
    ConfigManager,
    DashboardConfig,
    LoggingConfig,
    ShoalConfig,
    SnapshotConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "ApiConfig",
    "ConfigManager",
    "DashboardConfig",
    "LoggingConfig",
    "ShoalConfig",
    "SnapshotConfig",
    "get_default_config",
    "load_config_from_env",
]
