"""Logging utilities for monitoring and debugging."""

from quotefit.core.logging.config import LogConfig
from quotefit.core.logging.logger import (
    configure_logging,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "configure_logging",
    "log_context",
    "logger",
]
