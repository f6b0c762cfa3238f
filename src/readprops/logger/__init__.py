"""
readprops logger module

Usage:
    from readprops.logger import get_logger, create_logger

    logger = get_logger()
    logger.info("Resolution pass finished", keys=12)

    logger = create_logger(level=logging.DEBUG, json_format=True)

Environment Variables:
    {PREFIX}_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    {PREFIX}_LOG_FILE: Optional file path for log output
    {PREFIX}_LOG_JSON: Set to "true" for JSON output format

    Where {PREFIX} is derived from the logger name ("readprops" -> READPROPS)
"""

import logging
import os
from typing import Dict, Optional

from .interface import Logger
from .structured_logger import JsonFormatter, StructuredLogger, TextFormatter

DEFAULT_LOGGER_NAME = "readprops"

# Loggers handed out by create_logger/get_logger, by name
_loggers: Dict[str, Logger] = {}


def _get_env_prefix(name: str) -> str:
    """Convert a logger name to its environment variable prefix.

    Examples:
        "readprops" -> "READPROPS"
        "readprops-cli" -> "READPROPS_CLI"
    """
    return name.upper().replace("-", "_").replace(".", "_")


def create_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> Logger:
    """Create and configure a logger, replacing any handlers of that name.

    The result becomes the shared instance returned by ``get_logger``.

    Parameters left as None are read from {PREFIX}_LOG_LEVEL,
    {PREFIX}_LOG_FILE and {PREFIX}_LOG_JSON.
    """
    env_prefix = _get_env_prefix(name)

    if level is None:
        level_str = os.environ.get(f"{env_prefix}_LOG_LEVEL", "INFO").upper()
        level = getattr(logging, level_str, logging.INFO)

    if log_file is None:
        log_file = os.environ.get(f"{env_prefix}_LOG_FILE")

    if json_format is None:
        json_format = os.environ.get(f"{env_prefix}_LOG_JSON", "false").lower() == "true"

    logger = StructuredLogger(
        name=name,
        level=level,
        log_file=log_file,
        json_format=json_format,
    )
    _loggers[name] = logger
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> Logger:
    """Get the shared logger for ``name``.

    The first call configures it from environment variables, unless the
    ``logging`` logger already has handlers (set up by the application), in
    which case that setup is used as-is. Later calls return the same
    instance, so library code never resets a caller's configuration.
    """
    logger = _loggers.get(name)
    if logger is None:
        if logging.getLogger(name).handlers:
            logger = _loggers[name] = StructuredLogger.attach(name)
        else:
            logger = create_logger(name=name)
    return logger


def reset_loggers() -> None:
    """Close and forget every logger handed out so far (primarily for testing)."""
    for name in list(_loggers):
        logger = _loggers.pop(name)
        if isinstance(logger, StructuredLogger):
            logger.close()


__all__ = [
    "Logger",
    "StructuredLogger",
    "JsonFormatter",
    "TextFormatter",
    "DEFAULT_LOGGER_NAME",
    "create_logger",
    "get_logger",
    "reset_loggers",
]
