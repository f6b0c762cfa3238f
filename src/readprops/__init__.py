"""readprops - read property files and resolve ${...} placeholders.

This package provides:
- resolver: ${name} substitution across a property map, system properties
  and ${env.NAME} environment variables
- environment: system property and environment snapshot sources
- loader: property file loading with profile-expanded paths
- config: typed settings read from READPROPS_* environment variables
- logger: structured logging with text or JSON output
- exceptions: structured error classes
"""

__version__ = "1.0.0"

from readprops.logger import (
    Logger,
    StructuredLogger,
    get_logger,
    create_logger,
)

from readprops.exceptions import (
    ReadPropsError,
    ConfigurationError,
    PropertyFileError,
    PropertyFileNotFoundError,
    PropertyFileReadError,
    EnvironmentReadError,
    CycleDetectedError,
)

from readprops.environment import (
    EnvironmentAccessor,
    SystemProperties,
    has_environment_reference,
)

from readprops.resolver import (
    PlaceholderResolver,
    resolve,
    resolve_all,
)

from readprops.config import (
    Settings,
    ResolverSettings,
    LoaderSettings,
    LogSettings,
    get_settings,
    reset_settings,
)

from readprops.loader import (
    PropertyFileLoader,
    read_properties,
)

__all__ = [
    "__version__",
    # Logger
    "Logger",
    "StructuredLogger",
    "get_logger",
    "create_logger",
    # Exceptions
    "ReadPropsError",
    "ConfigurationError",
    "PropertyFileError",
    "PropertyFileNotFoundError",
    "PropertyFileReadError",
    "EnvironmentReadError",
    "CycleDetectedError",
    # Environment
    "EnvironmentAccessor",
    "SystemProperties",
    "has_environment_reference",
    # Resolver
    "PlaceholderResolver",
    "resolve",
    "resolve_all",
    # Config
    "Settings",
    "ResolverSettings",
    "LoaderSettings",
    "LogSettings",
    "get_settings",
    "reset_settings",
    # Loader
    "PropertyFileLoader",
    "read_properties",
]
