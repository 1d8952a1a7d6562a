"""
utils/logging.py — structlog setup shared by the CLI and the pipelines.

Two renderers are supported: "console" (key=value lines, coloured on a TTY)
and "json" (one object per line, for log shippers). The CLI calls
configure_logging() before running any command; library code only ever
asks for loggers.

Usage:
    from argeo_pipeline.utils.logging import configure_logging, get_logger

    configure_logging("DEBUG", "json")
    log = get_logger(__name__, pipeline="seed")
    log.info("phase_complete", phase="provinces", inserted=25)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from argeo_shared.config import settings

# Chatty stdlib loggers of our dependencies; only their warnings are useful.
_QUIET_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog (and the stdlib root logger) for this process.

    Safe to call more than once; the last call wins.

    Args:
        log_level:  "DEBUG" | "INFO" | "WARNING" | "ERROR" (default: settings.log_level).
        log_format: "console" | "json" (default: settings.log_format).
    """
    level_name = (log_level or settings.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(log_format or settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.typing.FilteringBoundLogger:
    """
    Return a lazy logger carrying `initial_values` on every event.

    The logger is only materialized when first used, so module-level
    loggers pick up whatever configure_logging() set later.
    """
    return structlog.get_logger(name, **initial_values)
