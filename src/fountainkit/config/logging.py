"""Logging configuration for fountainkit.

structlog events go through the standard library: every record ends up in
stdlib handlers whose ProcessorFormatter renders it as console text, JSON or
key=value pairs, depending on ``log_format``.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import (
    CallsiteParameter,
    CallsiteParameterAdder,
    TimeStamper,
    add_log_level,
    dict_tracebacks,
    format_exc_info,
)
from structlog.stdlib import (
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
)

from fountainkit.config.settings import FountainKitSettings

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5

_FOREIGN_PRE_CHAIN: list[Any] = [
    TimeStamper(fmt="iso"),
    add_log_level,
    add_logger_name,
]


def _resolve_level(name: str) -> int:
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        known = sorted(n for n in logging.getLevelNamesMapping() if not n.startswith("_"))
        raise ValueError(f"Invalid log level '{name}'. Valid levels are: {', '.join(known)}")
    return level


def _build_formatter(log_format: str) -> ProcessorFormatter:
    """Create the stdlib formatter matching the configured log format."""
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    elif log_format == "structured":
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            drop_missing=True,
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return ProcessorFormatter(processor=renderer, foreign_pre_chain=_FOREIGN_PRE_CHAIN)


def _build_handlers(
    settings: FountainKitSettings, level: int, formatter: logging.Formatter
) -> list[logging.Handler]:
    """Stderr handler, plus a rotating file handler when ``log_file`` is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path,
                maxBytes=_LOG_FILE_MAX_BYTES,
                backupCount=_LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def _build_processors(settings: FountainKitSettings) -> list[Any]:
    processors: list[Any] = [
        merge_contextvars,
        filter_by_level,
        TimeStamper(fmt="iso"),
        add_log_level,
        dict_tracebacks,
    ]
    if settings.debug:
        processors.append(
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    processors.append(format_exc_info)

    # caplog only sees records that reach the stdlib formatter
    under_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ
    if settings.log_format == "console" and not under_pytest:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(ProcessorFormatter.wrap_for_formatter)
    return processors


def configure_logging(settings: FountainKitSettings) -> None:
    """Configure stdlib logging and structlog from settings.

    Args:
        settings: Settings carrying log_level, log_format, log_file and debug.

    Raises:
        ValueError: If the log level is not known to the logging module.
    """
    level = _resolve_level(settings.log_level)
    formatter = _build_formatter(settings.log_format)
    logging.basicConfig(
        level=level,
        handlers=_build_handlers(settings, level, formatter),
        force=True,
    )

    structlog.configure(
        processors=_build_processors(settings),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger named ``name``, usually ``__name__``."""
    return structlog.get_logger(name)
