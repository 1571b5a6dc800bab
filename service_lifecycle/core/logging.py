"""
service_lifecycle/core/logging.py
Structured logging setup using structlog
"""

import logging
import sys
from typing import Any, List, Optional
import structlog
from structlog.stdlib import BoundLogger


ROOT_LOGGER_NAME = "service_lifecycle"


def build_processors(log_format: str = "json") -> List[Any]:
    """Processor chain for the given output format ("json" or "console")."""
    # exc_info is left for the renderer stage: dict_tracebacks (json) and
    # ConsoleRenderer both consume it and do nothing once it is formatted.
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        return shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer()
        ]
    return shared_processors + [
        structlog.dev.ConsoleRenderer(colors=True)
    ]


def setup_logging(level: str = "INFO", log_format: str = "json") -> BoundLogger:
    """
    Configure structured logging for the process

    Args:
        level: stdlib level name ("DEBUG", "info", ...)
        log_format: "json" for production, "console" for development

    Returns:
        Configured root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger(ROOT_LOGGER_NAME)
    logger.info("logging_configured", level=logging.getLevelName(log_level), format=log_format)
    return logger


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """
    Get a logger instance

    Args:
        name: Logger name (e.g., "lifecycle", "listener")
    """
    if name:
        return structlog.get_logger(f"{ROOT_LOGGER_NAME}.{name}")
    return structlog.get_logger(ROOT_LOGGER_NAME)


__all__ = ["setup_logging", "build_processors", "get_logger", "ROOT_LOGGER_NAME"]
