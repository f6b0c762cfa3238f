"""Placeholder resolution for property maps.

Values may reference other properties as ``${name}``. A reference is looked
up, in order, in the property map itself, in the system properties, and for
``${env.NAME}`` tokens in the environment snapshot. A found value is spliced
back in front of the unscanned text so it can carry further references;
a reference that cannot be resolved is kept verbatim and never re-scanned.

Example:
    props = {"host": "localhost", "url": "http://${host}:${port}"}
    resolve_all(props)
    props["url"]  # "http://localhost:${port}"

The resolution is not a fixpoint computation: a chain of distinct keys that
keeps producing new references keeps expanding. Each splice counts against
``max_expansions`` and exceeding it raises ``CycleDetectedError`` instead of
looping forever on ``a=${b}``, ``b=${a}``.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Mapping, MutableMapping, Optional

from readprops.environment import (
    ENV_KEY_PREFIX,
    DeferredSnapshot,
    EnvironmentAccessor,
    EnvironmentSnapshot,
    SystemProperties,
)
from readprops.exceptions import CycleDetectedError
from readprops.logger import Logger, get_logger

if TYPE_CHECKING:
    from readprops.config import ResolverSettings

TOKEN_OPEN = "${"
TOKEN_CLOSE = "}"

DEFAULT_MAX_EXPANSIONS = 10_000

# Token names kept for CycleDetectedError.chain
_CHAIN_LENGTH = 16


def _token(name: str) -> str:
    return f"{TOKEN_OPEN}{name}{TOKEN_CLOSE}"


class PlaceholderResolver:
    """Resolve ``${name}`` references against a property map.

    Args:
        system_properties: Second lookup source, after the map itself
        max_expansions: Substitutions allowed per resolved key; None or 0 means unbounded
        accessor: Environment source used by ``resolve_all``
        probe_environment: Defer the environment snapshot until an env. token is looked up
        logger: Logger for pass summaries and unresolved tokens
    """

    def __init__(
        self,
        system_properties: Optional[SystemProperties] = None,
        max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS,
        accessor: Optional[EnvironmentAccessor] = None,
        probe_environment: bool = True,
        logger: Optional[Logger] = None,
    ) -> None:
        if max_expansions is not None and max_expansions < 0:
            raise ValueError(f"max_expansions must be >= 0, got {max_expansions}")
        self.system_properties = system_properties or SystemProperties()
        self.max_expansions = max_expansions or None
        self.accessor = accessor or EnvironmentAccessor()
        self.probe_environment = probe_environment
        self.logger = logger or get_logger()

    @classmethod
    def from_settings(
        cls,
        settings: "ResolverSettings",
        system_properties: Optional[SystemProperties] = None,
        logger: Optional[Logger] = None,
    ) -> "PlaceholderResolver":
        return cls(
            system_properties=system_properties,
            max_expansions=settings.max_expansions,
            accessor=EnvironmentAccessor(settings.env_file),
            probe_environment=settings.probe_environment,
            logger=logger,
        )

    def lookup(
        self,
        name: str,
        props: Mapping[str, str],
        env: Optional[EnvironmentSnapshot] = None,
    ) -> Optional[str]:
        """Return the value for a token name from the first source that has it."""
        value = props.get(name)
        if value is None:
            value = self.system_properties.get(name)
        if value is None and env is not None and name.startswith(ENV_KEY_PREFIX):
            value = env.get(name[len(ENV_KEY_PREFIX):])
        return value

    def resolve(
        self,
        key: str,
        props: Mapping[str, str],
        env: Optional[EnvironmentSnapshot] = None,
    ) -> str:
        """Return ``props[key]`` with its placeholders substituted.

        An unterminated ``${`` ends the scan and the dangling fragment is
        dropped from the result.

        Raises:
            KeyError: If ``key`` is not in ``props``
            CycleDetectedError: If more than ``max_expansions`` substitutions are needed
        """
        pending = props[key]
        pos = 0
        parts: list[str] = []
        expansions = 0
        chain: deque[str] = deque(maxlen=_CHAIN_LENGTH)

        while True:
            start = pending.find(TOKEN_OPEN, pos)
            if start < 0:
                parts.append(pending[pos:])
                break
            parts.append(pending[pos:start])

            end = pending.find(TOKEN_CLOSE, start + len(TOKEN_OPEN))
            if end < 0:
                break

            name = pending[start + len(TOKEN_OPEN):end]
            pos = end + len(TOKEN_CLOSE)
            value = self.lookup(name, props, env)

            # Unresolved or trivially self-referencing: keep the token as-is
            if value is None or value == name or value == _token(name):
                self.logger.debug("Unresolved placeholder", key=key, placeholder=name)
                parts.append(_token(name))
                continue

            expansions += 1
            chain.append(name)
            if self.max_expansions is not None and expansions > self.max_expansions:
                self.logger.error(
                    "Placeholder expansion did not terminate",
                    key=key,
                    chain=",".join(chain),
                )
                raise CycleDetectedError(key, list(chain), self.max_expansions)

            pending = value + pending[pos:]
            pos = 0

        return "".join(parts)

    def resolve_all(
        self,
        props: MutableMapping[str, str],
        env: Optional[EnvironmentSnapshot] = None,
    ) -> None:
        """Resolve every key of ``props`` in place.

        Only keys present when the pass starts are visited. Keys resolved
        earlier in the pass are seen by later keys in their resolved form.
        When ``env`` is not given the accessor supplies it, capturing the
        environment at most once for the whole pass.

        Raises:
            EnvironmentReadError: If a snapshot is needed and cannot be taken
            CycleDetectedError: See ``resolve``
        """
        if env is None:
            env = self.accessor.snapshot_for(props, probe=self.probe_environment)

        keys = list(props)
        for key in keys:
            props[key] = self.resolve(key, props, env)

        self.logger.debug(
            "Resolved properties",
            keys=len(keys),
            environment=not isinstance(env, DeferredSnapshot) or env.taken,
        )


def resolve(
    key: str,
    props: Mapping[str, str],
    env: Optional[EnvironmentSnapshot] = None,
    system_properties: Optional[SystemProperties] = None,
    max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS,
) -> str:
    """Resolve a single key with a one-off resolver."""
    resolver = PlaceholderResolver(
        system_properties=system_properties,
        max_expansions=max_expansions,
    )
    return resolver.resolve(key, props, env)


def resolve_all(
    props: MutableMapping[str, str],
    system_properties: Optional[SystemProperties] = None,
    env: Optional[EnvironmentSnapshot] = None,
    max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS,
) -> None:
    """Resolve every key of ``props`` in place with a one-off resolver."""
    resolver = PlaceholderResolver(
        system_properties=system_properties,
        max_expansions=max_expansions,
    )
    resolver.resolve_all(props, env)


__all__ = [
    "DEFAULT_MAX_EXPANSIONS",
    "PlaceholderResolver",
    "resolve",
    "resolve_all",
]
