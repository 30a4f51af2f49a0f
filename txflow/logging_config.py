"""
Structured logging for txflow.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` routes
those records through structlog so submission context bound with
``submission_context`` lands on every line.
"""

import logging
import sys
from typing import IO, Optional

import structlog

from .config import settings

QUIET_LOGGERS = ("httpcore", "httpx")


def _shared_processors(json_logs: bool) -> list:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(
    log_level: Optional[str] = None,
    *,
    json_logs: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Install a single root handler rendering txflow records with structlog.

    Args:
        log_level: Override level (default: ``settings.log_level``)
        json_logs: JSON lines when true, console rendering otherwise
            (default: console only at DEBUG)
        stream: Destination stream (default: stdout)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = level != logging.DEBUG

    shared = _shared_processors(json_logs)
    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def submission_context(**values: object):
    """Bind correlation fields (e.g. ``submission_id``) for the duration of a block."""
    return structlog.contextvars.bound_contextvars(**values)
