"""Base exception classes for readprops.

All readprops exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging
"""

from typing import Any, Dict, List, Optional


class ReadPropsError(Exception):
    """Base exception for all readprops errors.

    Attributes:
        code: Machine-readable error code (e.g., "PROPERTY_FILE_NOT_FOUND")
        message: Human-readable error message
        details: Optional additional context for debugging
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with structured information.

        Args:
            code: Machine-readable error code
            message: Human-readable error message
            details: Optional additional context
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ReadPropsError):
    """Raised when settings read from the environment are invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="INVALID_CONFIGURATION", message=message, details=details)


class PropertyFileError(ReadPropsError):
    """Base for errors about a properties file.

    The offending file is always available as ``path``.
    """

    def __init__(self, code: str, message: str, path: str):
        self.path = path
        super().__init__(code=code, message=message, details={"path": path})


class PropertyFileNotFoundError(PropertyFileError):
    """A configured properties file does not exist."""

    def __init__(self, path: str):
        super().__init__(
            code="PROPERTY_FILE_NOT_FOUND",
            message=f"Properties file not found: {path}",
            path=path,
        )


class PropertyFileReadError(PropertyFileError):
    """A properties file exists but could not be read."""

    def __init__(self, path: str):
        super().__init__(
            code="PROPERTY_FILE_READ_FAILED",
            message=f"Error reading properties file {path}",
            path=path,
        )


class EnvironmentReadError(ReadPropsError):
    """The OS environment could not be captured.

    Only reachable when at least one value references an ``${env.*}`` token.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="ENVIRONMENT_READ_FAILED", message=message, details=details)


class CycleDetectedError(ReadPropsError):
    """Placeholder expansion for one key did not terminate within its bound.

    Attributes:
        key: Property whose value was being resolved
        chain: Most recent placeholder names expanded, oldest first
        limit: Expansion bound that was exceeded
    """

    def __init__(self, key: str, chain: List[str], limit: int):
        self.key = key
        self.chain = list(chain)
        self.limit = limit
        super().__init__(
            code="CYCLE_DETECTED",
            message=f"Placeholder expansion for '{key}' exceeded {limit} substitutions",
            details={"key": key, "chain": self.chain, "limit": limit},
        )
