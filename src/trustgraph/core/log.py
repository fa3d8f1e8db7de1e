"""
structlog setup shared by every module.

Events go to stderr (stdout carries the CLI's progress lines). LOG_FORMAT=json
renders one object per line with the event name under ``event_type``;
anything else uses structlog's console renderer.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, List

import structlog

from trustgraph.config import settings


def build_processors(log_format: str) -> List[Any]:
    processors: List[Any] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        processors.append(structlog.processors.EventRenamer("event_type"))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


if not structlog.is_configured():
    structlog.configure(
        processors=build_processors(settings.LOG_FORMAT),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.LOG_LEVEL, logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    # logger = get_logger(__name__); logger.info("edges_synced", added=3)
    return structlog.get_logger(name).bind(logger=name)
