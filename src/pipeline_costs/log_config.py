"""structlog setup shared by the API server and scripts."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, cast

import structlog

from pipeline_costs.config import DEBUG_ENV


def _debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, "").strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(debug: bool | None = None) -> None:
    """Configure structlog processors and route stdlib logging to stderr."""
    if debug is None:
        debug = _debug_enabled()

    base_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if debug:
        renderer: Any = structlog.dev.ConsoleRenderer()
        processors = base_processors + [renderer]
        min_level = logging.DEBUG
    else:
        renderer = structlog.processors.JSONRenderer()
        processors = base_processors + [structlog.processors.dict_tracebacks, renderer]
        min_level = logging.INFO

    structlog.configure(
        processors=cast(Any, processors),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn logs through the stdlib.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=min_level)
