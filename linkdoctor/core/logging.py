"""Structured logging configuration: structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog


def setup_logging(level: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Reads from environment variables:
        LINKDOCTOR_LOG_LEVEL  : log level (default: WARNING)
        LINKDOCTOR_LOG_FORMAT : console | json (default: console)

    An explicit *level* (e.g. from the CLI ``-v`` flag) wins over the env.
    Logs are written to stderr so command output on stdout stays parseable.
    Console output is colored only when stderr is a terminal and
    ``NO_COLOR`` is unset.
    """
    log_level = (level or os.environ.get("LINKDOCTOR_LOG_LEVEL", "WARNING")).upper()
    log_format = os.environ.get("LINKDOCTOR_LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=_colors_enabled())

    # --- structlog configure ---
    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # --- stdlib logging configure ---
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "linkdoctor": {"level": log_level},
                "asyncio": {"level": "WARNING"},
            },
        }
    )


def _colors_enabled() -> bool:
    return sys.stderr.isatty() and "NO_COLOR" not in os.environ
