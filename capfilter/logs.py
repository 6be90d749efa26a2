"""
capfilter Logging Configuration

Structured logging with structlog, shared by the API and the CLI.
"""

import logging

import structlog

from capfilter.config import settings


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure structured logging with structlog.

    Args:
        level: Log level name (defaults to settings.log_level)
        log_format: "json" or "console" (defaults to settings.log_format)
    """
    # Map log level string to logging module level
    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    # Determine processors based on log format
    if (log_format or settings.log_format) == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
