"""Dataclass-based settings for readprops

Typed configuration read from environment variables with a parameterised
prefix (default READPROPS), so an embedding tool can use its own names.

Environment variables:
    {prefix}_MAX_EXPANSIONS: Substitutions allowed per key (0 or "none" = unbounded)
    {prefix}_PROBE_ENVIRONMENT: Scan values for ${env.*} before snapshotting
    {prefix}_ENV_FILE: Optional .env file layered under the OS environment
    {prefix}_QUIET: Ignore missing or unreadable property files
    {prefix}_SKIP: Skip loading entirely
    {prefix}_ACTIVE_PROFILES: Comma separated profiles for path expansion
    {prefix}_LOG_LEVEL / {prefix}_LOG_FILE / {prefix}_LOG_JSON: Logging
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from readprops.exceptions import ConfigurationError
from readprops.resolver import DEFAULT_MAX_EXPANSIONS

DEFAULT_PREFIX = "READPROPS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_bool(value: Optional[str], name: str, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}", details={"name": name})


def _parse_max_expansions(value: Optional[str], name: str) -> Optional[int]:
    """Convert the expansion bound; 0 and "none" disable it."""
    if value is None or value.strip() == "":
        return DEFAULT_MAX_EXPANSIONS
    if value.strip().lower() == "none":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer, got {value!r}", details={"name": name}
        ) from exc
    if parsed < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {parsed}", details={"name": name})
    return parsed or None


def _split_profiles(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


@dataclass
class ResolverSettings:
    """Placeholder resolution configuration

    Attributes:
        max_expansions: Substitutions allowed per key, None for unbounded
        probe_environment: Only snapshot the environment when a value uses ${env.*}
        env_file: Optional .env file consulted for ${env.*} tokens
    """

    max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS
    probe_environment: bool = True
    env_file: Optional[Path] = None

    def __post_init__(self) -> None:
        if isinstance(self.env_file, str):
            self.env_file = Path(self.env_file)

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "ResolverSettings":
        env = os.environ if environ is None else environ
        env_file = env.get(f"{prefix}_ENV_FILE")
        return cls(
            max_expansions=_parse_max_expansions(
                env.get(f"{prefix}_MAX_EXPANSIONS"), f"{prefix}_MAX_EXPANSIONS"
            ),
            probe_environment=_parse_bool(
                env.get(f"{prefix}_PROBE_ENVIRONMENT"), f"{prefix}_PROBE_ENVIRONMENT", True
            ),
            env_file=Path(env_file) if env_file else None,
        )


@dataclass
class LoaderSettings:
    """Property file loading configuration

    Attributes:
        quiet: Warn instead of failing on missing or unreadable files
        skip: Do nothing at all
        active_profiles: Profiles substituted for ${project.activeProfile} in paths
    """

    quiet: bool = False
    skip: bool = False
    active_profiles: List[str] = field(default_factory=list)

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "LoaderSettings":
        env = os.environ if environ is None else environ
        return cls(
            quiet=_parse_bool(env.get(f"{prefix}_QUIET"), f"{prefix}_QUIET", False),
            skip=_parse_bool(env.get(f"{prefix}_SKIP"), f"{prefix}_SKIP", False),
            active_profiles=_split_profiles(env.get(f"{prefix}_ACTIVE_PROFILES")),
        )


@dataclass
class LogSettings:
    """Logging configuration

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        file: Optional log file path
        json: Emit JSON records instead of text
    """

    level: str = "INFO"
    file: Optional[str] = None
    json: bool = False

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "LogSettings":
        env = os.environ if environ is None else environ
        return cls(
            level=env.get(f"{prefix}_LOG_LEVEL", "INFO").upper(),
            file=env.get(f"{prefix}_LOG_FILE") or None,
            json=_parse_bool(env.get(f"{prefix}_LOG_JSON"), f"{prefix}_LOG_JSON", False),
        )

    @property
    def level_number(self) -> int:
        return getattr(logging, self.level, logging.INFO)


@dataclass
class Settings:
    """Complete readprops settings

    Attributes:
        resolver: Placeholder resolution settings
        loader: Property file loading settings
        log: Logging settings
        prefix: Environment variable prefix used
    """

    resolver: ResolverSettings = field(default_factory=ResolverSettings)
    loader: LoaderSettings = field(default_factory=LoaderSettings)
    log: LogSettings = field(default_factory=LogSettings)
    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """Load complete settings from environment variables

        Args:
            prefix: Environment variable prefix (default: READPROPS)
            environ: Mapping to read instead of os.environ
        """
        return cls(
            resolver=ResolverSettings.from_env(prefix, environ),
            loader=LoaderSettings.from_env(prefix, environ),
            log=LogSettings.from_env(prefix, environ),
            prefix=prefix,
        )

    def validate(self) -> None:
        """
        Validate settings for consistency

        Raises:
            ConfigurationError: If settings are invalid
        """
        if self.log.level not in _ALLOWED_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level '{self.log.level}'. Expected one of {sorted(_ALLOWED_LOG_LEVELS)}.",
                details={"name": f"{self.prefix}_LOG_LEVEL"},
            )
        if self.resolver.env_file is not None and not self.resolver.env_file.is_file():
            raise ConfigurationError(
                f"Environment file not found: {self.resolver.env_file}",
                details={"name": f"{self.prefix}_ENV_FILE"},
            )


# Global settings storage per prefix
_global_settings: dict[str, Settings] = {}


def get_settings(prefix: str = DEFAULT_PREFIX, reload: bool = False) -> Settings:
    """
    Get or create the settings instance for a given prefix

    Args:
        prefix: Environment variable prefix
        reload: If True, reload settings from environment
    """
    if prefix not in _global_settings or reload:
        settings = Settings.from_env(prefix=prefix)
        settings.validate()
        _global_settings[prefix] = settings

    return _global_settings[prefix]


def reset_settings(prefix: Optional[str] = None) -> None:
    """Reset cached settings (primarily for testing)

    Args:
        prefix: Specific prefix to reset, or None to reset all
    """
    if prefix:
        _global_settings.pop(prefix, None)
    else:
        _global_settings.clear()
