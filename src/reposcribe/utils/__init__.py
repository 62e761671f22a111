"""Reposcribe utilities."""

from reposcribe.utils.logging import (
    LogMode,
    configure_from_config,
    get_logger,
    setup_logging,
)

__all__ = [
    "LogMode",
    "configure_from_config",
    "get_logger",
    "setup_logging",
]
