"""
Structured logging on top of the standard ``logging`` module.

``StructuredLogger(...)`` owns the handler setup of its named logger.
``StructuredLogger.attach(name)`` logs through whatever handlers are
already installed and leaves them alone.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from .interface import Logger

TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [session:%(session_id)s] %(message)s"

# Attributes every LogRecord carries, plus those added while formatting
RESERVED_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the keyword extras attached to a record, minus the session id."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in RESERVED_RECORD_KEYS and key != "session_id"
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        session_id = getattr(record, "session_id", None)
        if session_id:
            payload["session_id"] = str(session_id)
        payload.update(record_extras(record))
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Standard text line followed by the extras as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in record_extras(record).items())
        return f"{line} {pairs}" if pairs else line


def build_handlers(
    json_format: bool = False,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> list:
    """Create the console handler and, when requested, a file handler."""
    formatter: logging.Formatter = JsonFormatter() if json_format else TextFormatter(TEXT_FORMAT)

    handlers: list = [logging.StreamHandler(stream if stream is not None else sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            print(f"Cannot open log file {log_file}, logging to console only: {e}", file=sys.stderr)

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def close_handlers(logger: logging.Logger) -> None:
    """Detach and close every handler of ``logger``."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class StructuredLogger(Logger):
    """Logger backed by ``logging`` with text or JSON output.

    Constructing one configures the named ``logging`` logger: previous
    handlers are closed and replaced. Use ``attach`` to reuse an existing
    configuration instead.

    Example:
        logger = StructuredLogger(name="readprops", json_format=True,
                                  log_file="/var/log/readprops.log")
        logger.info("Loading property file", path="app.properties")
    """

    def __init__(
        self,
        name: str = "readprops",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
        stream: Optional[TextIO] = None,
    ):
        """Initialize and configure the structured logger.

        Args:
            name: Name of the underlying ``logging`` logger
            level: Logging level (logging.DEBUG, logging.INFO, etc.)
            log_file: Optional file path for log output
            json_format: If True, output logs as JSON; otherwise use text format
            stream: Console stream (default: stderr, so stdout stays clean for output)
        """
        self._name = name
        self._session_id = uuid.uuid4().hex[:8]
        self._logger = logging.getLogger(name)
        self.configure(level, log_file=log_file, json_format=json_format, stream=stream)

    @classmethod
    def attach(cls, name: str = "readprops") -> "StructuredLogger":
        """Log through ``name`` without touching its level or handlers."""
        instance = cls.__new__(cls)
        instance._name = name
        instance._session_id = uuid.uuid4().hex[:8]
        instance._logger = logging.getLogger(name)
        instance._handlers = []
        return instance

    def configure(
        self,
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
        stream: Optional[TextIO] = None,
    ) -> None:
        """Replace the handlers of the underlying logger."""
        close_handlers(self._logger)
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._handlers = build_handlers(json_format, log_file, stream)
        for handler in self._handlers:
            self._logger.addHandler(handler)

    def close(self) -> None:
        """Close and remove the handlers this instance installed."""
        for handler in self._handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> int:
        return self._logger.getEffectiveLevel()

    def get_session_id(self) -> str:
        return self._session_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra: Dict[str, Any] = {"session_id": self._session_id}
        for k, v in kwargs.items():
            # Reserved names would make logging raise on overwrite
            extra[f"_{k}" if k in RESERVED_RECORD_KEYS else k] = v
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)
