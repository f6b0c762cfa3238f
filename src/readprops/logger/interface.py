"""
Logger interface for readprops.

Every component takes an optional ``Logger`` so callers can plug in their
own implementation; ``StructuredLogger`` is the one used by default.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract logging contract.

    Keyword arguments passed to any level method are structured extras
    (e.g. ``logger.info("Loaded", path=path, keys=12)``).
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        """Log a critical message."""

    @abstractmethod
    def get_session_id(self) -> str:
        """Return the identifier shared by all records of this logger instance."""
