"""Exceptions raised by readprops.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging

Usage:
    from readprops.exceptions import ReadPropsError, CycleDetectedError

    try:
        resolve_all(props)
    except CycleDetectedError as exc:
        print(exc.chain)
"""

from readprops.exceptions.base import (
    ConfigurationError,
    CycleDetectedError,
    EnvironmentReadError,
    PropertyFileError,
    PropertyFileNotFoundError,
    PropertyFileReadError,
    ReadPropsError,
)

__all__ = [
    "ReadPropsError",
    "ConfigurationError",
    "PropertyFileError",
    "PropertyFileNotFoundError",
    "PropertyFileReadError",
    "EnvironmentReadError",
    "CycleDetectedError",
]
