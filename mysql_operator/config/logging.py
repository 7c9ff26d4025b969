"""
Structured logging configuration using structlog.
Provides JSON logging for production and human-readable logging for development.
"""
import logging
import sys
from typing import Any, Callable

import structlog
from structlog.types import EventDict, Processor

from mysql_operator.config.settings import OperatorOptions


def _app_context(options: OperatorOptions) -> Callable[[Any, str, EventDict], EventDict]:
    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        """Add application context to log events."""
        event_dict["app"] = options.app_name
        event_dict["version"] = options.app_version
        event_dict["environment"] = options.environment
        return event_dict

    return add_app_context


def add_severity_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add severity level for Google Cloud Logging compatibility."""
    if "level" in event_dict:
        event_dict["severity"] = event_dict["level"].upper()
    return event_dict


def configure_logging(options: OperatorOptions) -> None:
    """Configure structured logging for the operator."""

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _app_context(options),
        add_severity_level,
    ]

    if options.is_production:
        # Production: JSON logging
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Human-readable colored logging
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,  # type: ignore
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, options.log_level),
    )

    # Set log levels for third-party libraries
    logging.getLogger("kubernetes_asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
