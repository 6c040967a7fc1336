"""Configuration management module."""

from quotefit.core.config.settings import (
    ConfigManager,
    FetchConfig,
    LoggingConfig,
    ModelConfig,
    QuoteFitConfig,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "QuoteFitConfig",
    "FetchConfig",
    "ModelConfig",
    "LoggingConfig",
    "load_config_from_env",
]
