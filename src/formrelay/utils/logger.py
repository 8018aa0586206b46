"""
Module: logger.py
Description: Structured logging configuration for FormRelay.

Configures structlog for JSON output on stdout so that API and worker
processes emit one machine-readable line per event, with the submission
id and attempt details bound as keys.

Key Components:
- JSON output for log aggregation (CloudWatch or any line collector)
- Timestamp and log level processors
- Level filtering driven by settings.log_level
- get_logger() helper function

Dependencies: structlog, logging
Author: FormRelay Team
"""

import logging

import structlog

from formrelay.config.settings import settings


def _add_log_level(logger, method_name, event_dict):
    """
    Add log level to event dictionary.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with level
    """
    event_dict["level"] = method_name.upper()
    return event_dict


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.WriteLoggerFactory(),
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level)
    ),
    cache_logger_on_first_use=True,
)


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Submission queued", submission_id="3f2a...", status="pending")
        {"submission_id": "3f2a...", "status": "pending", "event": "Submission queued", "timestamp": "2026-01-15T10:30:00.000000Z", "level": "INFO"}
    """
    return structlog.get_logger(name)
