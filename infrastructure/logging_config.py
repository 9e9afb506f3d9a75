"""
Structured logging configuration using structlog
"""
import logging
from typing import Any, Optional

import structlog

APP_NAME = "room-booking-engine"


def add_app_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add application-level context to all log entries"""
    event_dict.setdefault('app', APP_NAME)
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: bool = False):
    """
    Configure structured logging for the engine

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON logs. If False, use human-readable format

    Returns:
        Configured structlog logger

    Usage:
        logger = configure_logging(settings.log_level, settings.json_logs)
        logger.info("reservation_created", room_id=room_id, reservation_id=str(reservation_id))
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_app_context,
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level] + shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level.upper())

    return structlog.get_logger()


def get_logger(name: Optional[str] = None):
    """
    Get a logger instance with optional name

    Usage:
        logger = get_logger(__name__)
        logger.info("availability_search", party_size=4, matches=2)
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
