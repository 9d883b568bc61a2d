# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Structured logging configuration (structlog)."""

import logging
import sys
from typing import Any

import structlog

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name, case-insensitive. Unknown names fall back to INFO.
        json_output: Render JSON lines instead of the console format.
    """
    normalized = (log_level or "").upper()
    if normalized not in _VALID_LEVELS:
        normalized = "INFO"
    level = getattr(logging, normalized)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, optionally bound to ``name``."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
