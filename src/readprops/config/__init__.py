"""Configuration for readprops

Example:
    from readprops.config import get_settings

    settings = get_settings()                 # READPROPS_* variables
    settings = get_settings(prefix="MYTOOL")  # MYTOOL_* variables
"""

from readprops.config.settings import (
    DEFAULT_PREFIX,
    LoaderSettings,
    LogSettings,
    ResolverSettings,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "DEFAULT_PREFIX",
    "ResolverSettings",
    "LoaderSettings",
    "LogSettings",
    "Settings",
    "get_settings",
    "reset_settings",
]
