"""Structured logging configuration using structlog.

Every event carries ``service`` and, when obtained through ``get_logger``, the
emitting ``component`` (``orders``, ``carts``, ``users.keycloak``...).
"""

from __future__ import annotations

import logging
import sys

import structlog

SERVICE_NAME = "wine-commerce"


def _add_service(logger, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, json_output: bool = False, level: int | str = logging.INFO) -> None:
    """Set up structlog with console or JSON rendering.

    The stdlib root logger gets the same level so uvicorn and SQLAlchemy
    output is filtered consistently.
    """
    log_level = _resolve_level(level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_service,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger, tagged with its component when named."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(component=name)
    return logger
