"""
Module: logger.py
Description: Structured logging configuration for the Event Relay sinks.

Configures structlog for JSON output so worker threads of every sink
write one machine-readable line per record. Provides consistent
logging across all modules with proper context and structured data.

Key Components:
- JSON output for log shippers
- Timestamp and log level processors
- Minimum level taken from runtime settings
- get_logger() helper function

Dependencies: structlog, datetime, logging, config.settings
Author: Event Relay Team
"""

import logging
from datetime import datetime, timezone

import structlog

from config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog for the whole process.

    Safe to call more than once; the last call wins. Loggers are not
    cached on first use so that reconfiguration (and log capture in
    tests) applies to module-level loggers too.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


configure_logging(settings.log_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("failed to deliver event", sink="webhook", variant="Block")
        {"sink": "webhook", "variant": "Block", "event": "failed to deliver event", "timestamp": "2024-01-15T10:30:00+00:00", "level": "WARNING"}
    """
    return structlog.get_logger(name)
