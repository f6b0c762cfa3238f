"""Read property files into a target store and resolve their placeholders.

Files are flat ``KEY=VALUE`` text parsed with python-dotenv (comments,
quoting and ``export`` prefixes behave as in a .env file; placeholder
interpolation is left to ``PlaceholderResolver``). Files are merged in the
order given, so later files overwrite earlier keys.

A path may contain ``${project.activeProfile}``; it is replaced by each
active profile in turn and the first existing expansion is read.

Example:
    loader = PropertyFileLoader(
        ["conf/base.properties", "conf/${project.activeProfile}.properties"],
        active_profiles=["prod"],
    )
    props = loader.execute()
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, MutableMapping, Optional, Sequence, Union

from dotenv import dotenv_values

from readprops.config import LoaderSettings
from readprops.exceptions import PropertyFileNotFoundError, PropertyFileReadError
from readprops.logger import Logger, get_logger
from readprops.resolver import PlaceholderResolver

ACTIVE_PROFILE_TOKEN = "${project.activeProfile}"

PathLike = Union[str, Path]


class PropertyFileLoader:
    """Load property files into a store, then run one resolution pass over it.

    Args:
        files: Files to read in order; None entries are ignored
        quiet: Warn and continue on missing or unreadable files
        skip: Make ``execute`` a no-op
        active_profiles: Substitutes for ``${project.activeProfile}`` in paths
        resolver: Resolver for the final pass
        logger: Logger for progress messages
    """

    def __init__(
        self,
        files: Sequence[Optional[PathLike]],
        quiet: bool = False,
        skip: bool = False,
        active_profiles: Iterable[str] = (),
        resolver: Optional[PlaceholderResolver] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.files = list(files)
        self.quiet = quiet
        self.skip = skip
        self.active_profiles = list(active_profiles)
        self.logger = logger or get_logger()
        self.resolver = resolver or PlaceholderResolver(logger=self.logger)

    @classmethod
    def from_settings(
        cls,
        files: Sequence[Optional[PathLike]],
        settings: LoaderSettings,
        resolver: Optional[PlaceholderResolver] = None,
        logger: Optional[Logger] = None,
    ) -> "PropertyFileLoader":
        return cls(
            files,
            quiet=settings.quiet,
            skip=settings.skip,
            active_profiles=settings.active_profiles,
            resolver=resolver,
            logger=logger,
        )

    def execute(self, target: Optional[MutableMapping[str, str]] = None) -> MutableMapping[str, str]:
        """Load every file into ``target`` and resolve all of its values.

        Returns:
            The target store (a new dict when none was given)

        Raises:
            PropertyFileNotFoundError: A file is missing and quiet is off
            PropertyFileReadError: A file cannot be read and quiet is off
            EnvironmentReadError: The environment is needed and cannot be read
            CycleDetectedError: A value does not stop expanding
        """
        store: MutableMapping[str, str] = {} if target is None else target
        if self.skip:
            self.logger.info("Skipping property files")
            return store

        for file in self.files:
            # An undefined path property arrives as None
            if file is None:
                continue
            self._load_file(self.expand_profile(Path(file)), store)

        self.resolver.resolve_all(store)
        return store

    def expand_profile(self, path: Path) -> Path:
        """Return the first existing profile expansion of ``path``, or ``path``."""
        raw = str(path.absolute())
        if ACTIVE_PROFILE_TOKEN not in raw:
            return path

        self.logger.info("Expanding property file", path=str(path))
        for profile in self.active_profiles:
            self.logger.info("Profile", profile=profile)
            expanded = Path(raw.replace(ACTIVE_PROFILE_TOKEN, profile))
            if expanded.exists():
                self.logger.info("Expanded file path", path=str(expanded))
                return expanded
        return path

    def _load_file(self, path: Path, store: MutableMapping[str, str]) -> None:
        absolute = str(path.absolute())
        if not path.exists():
            if self.quiet:
                self.logger.warning("Ignoring missing properties file", path=absolute)
                return
            raise PropertyFileNotFoundError(absolute)

        self.logger.debug("Loading property file", path=absolute)
        try:
            values = dotenv_values(path, interpolate=False)
        except (OSError, UnicodeDecodeError) as exc:
            if self.quiet:
                self.logger.warning("Ignoring unreadable properties file", path=absolute, error=str(exc))
                return
            raise PropertyFileReadError(absolute) from exc

        loaded = {k: v for k, v in values.items() if v is not None}
        store.update(loaded)
        self.logger.debug("Loaded property file", path=absolute, keys=len(loaded))


def read_properties(
    files: Sequence[Optional[PathLike]],
    target: Optional[MutableMapping[str, str]] = None,
    **kwargs,
) -> MutableMapping[str, str]:
    """Shortcut for ``PropertyFileLoader(files, **kwargs).execute(target)``."""
    return PropertyFileLoader(files, **kwargs).execute(target)


__all__ = [
    "ACTIVE_PROFILE_TOKEN",
    "PropertyFileLoader",
    "read_properties",
]
