"""fountainkit configuration module."""

from __future__ import annotations

from typing import Any

from fountainkit.config.logging import configure_logging
from fountainkit.config.logging import get_logger as _structlog_logger
from fountainkit.config.settings import (
    FountainKitSettings,
    clear_settings_cache,
    get_settings,
    get_settings_for_cli,
    read_config_file,
    set_settings,
)
from fountainkit.config.settings import reset_settings as _reset_global_settings

__all__ = [
    "FountainKitSettings",
    "clear_settings_cache",
    "configure_logging",
    "get_logger",
    "get_settings",
    "get_settings_for_cli",
    "read_config_file",
    "reset_settings",
    "set_settings",
]

_loggers: dict[str, Any] = {}


def get_logger(name: str) -> Any:
    """Get a logger for a fountainkit module.

    The first call configures logging from the global settings. Loggers are
    cached per name until reset_settings().

    Args:
        name: Logger name (usually __name__).

    Returns:
        structlog logger
    """
    if name not in _loggers:
        if not _loggers:
            configure_logging(get_settings())
        _loggers[name] = _structlog_logger(name)
    return _loggers[name]


def reset_settings() -> None:
    """Reset the global settings and forget cached loggers."""
    _reset_global_settings()
    _loggers.clear()
