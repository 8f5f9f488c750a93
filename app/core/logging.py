"""Structured logging for the cash card service.

Every event carries the service name and environment, so card mutations
and access denials can be filtered per deployment.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import add_logger_name, filter_by_level
from structlog.types import EventDict, Processor

from app.core.config import Settings


def add_service_context(settings: Settings) -> Processor:
    """Build a processor stamping ``service`` and ``env`` on each event."""
    service = settings.observability.service_name
    env = str(getattr(settings.app.env, "value", settings.app.env))

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("env", env)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog and route stdlib logging to stdout."""
    log_level = str(getattr(settings.app.log_level, "value", settings.app.log_level)).upper()
    level_number = getattr(logging, log_level, logging.INFO)

    processors: list[Processor] = [
        filter_by_level,
        add_log_level,
        add_logger_name,
        add_service_context(settings),
        TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.observability.log_record_format == "json":
        processors.append(JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level_number),
        processors=processors,
        # stdlib loggers: filter_by_level and add_logger_name read their level and name
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level_number,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LoggerMixin:
    """Gives services a ``logger`` named after their module."""

    @property
    def logger(self) -> structlog.BoundLogger:
        return get_logger(self.__class__.__module__)
