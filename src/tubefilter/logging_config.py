# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Logging setup for the tubefilter CLI and embedding programs.

stdlib loggers in every tubefilter module are rendered by structlog:
ConsoleRenderer by default, JSONRenderer when TUBEFILTER_LOG_JSON is set.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def configure(*, json_output: bool = False, level: str = "INFO") -> None:
    """Configure structlog with stdlib bridge.

    Args:
        json_output: True for JSON lines (machine consumers), False for human-readable.
        level: Root logger level (default INFO).
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    # stdout carries filtered documents, so logs always go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def configure_from_env(*, json_output: bool | None = None, level: str | None = None) -> None:
    """Configure logging, filling unset arguments from the environment.

    ``TUBEFILTER_LOG_JSON`` (truthy string) selects JSON lines and
    ``TUBEFILTER_LOG_LEVEL`` sets the root level. Explicit arguments win.
    """
    if json_output is None:
        json_output = _env_flag("TUBEFILTER_LOG_JSON")
    if level is None:
        level = os.environ.get("TUBEFILTER_LOG_LEVEL", "").strip() or "INFO"
    configure(json_output=json_output, level=level)
