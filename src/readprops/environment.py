"""Fallback lookup sources for placeholder resolution.

Two read-only sources sit behind the property map itself:

1) System properties: an injected ``name -> value`` lookup, typically built
   from ``-D KEY=VALUE`` options.
2) The OS environment, consulted only for ``${env.NAME}`` tokens. It is
   captured at most once per resolution pass as an immutable snapshot,
   layered over an optional ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from dotenv import dotenv_values

from readprops.exceptions import EnvironmentReadError

ENV_TOKEN_PREFIX = "${env."
ENV_KEY_PREFIX = "env."

EnvironmentSnapshot = Mapping[str, str]


class SystemProperties:
    """Read-only process-level properties passed explicitly to the resolver."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SystemProperties({dict(self._values)!r})"

    @classmethod
    def from_definitions(cls, definitions: list[str]) -> "SystemProperties":
        """Build from ``KEY=VALUE`` strings; a bare ``KEY`` maps to ``"true"``."""
        values: dict[str, str] = {}
        for definition in definitions:
            name, sep, value = definition.partition("=")
            values[name] = value if sep else "true"
        return cls(values)


def has_environment_reference(props: Mapping[str, str]) -> bool:
    """Return True if any value contains an ``${env.`` token."""
    return any(ENV_TOKEN_PREFIX in value for value in props.values())


class EnvironmentAccessor:
    """Capture the OS environment for ``env.`` lookups.

    Precedence (low -> high): .env file, OS env vars
    """

    def __init__(
        self,
        env_file: Optional[Path | str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.env_file = Path(env_file) if env_file else None
        self._environ = environ

    def snapshot(self) -> EnvironmentSnapshot:
        """Return the current environment as an immutable flat mapping.

        Raises:
            EnvironmentReadError: If the environment or .env file cannot be read
        """
        data: dict[str, str] = {}
        try:
            if self.env_file is not None and self.env_file.exists():
                file_values = dotenv_values(self.env_file)
                data.update({k: v for k, v in file_values.items() if v is not None})
            data.update(self._environ if self._environ is not None else os.environ)
        except (OSError, UnicodeDecodeError) as exc:
            raise EnvironmentReadError(
                "Error getting system environment variables",
                details={"env_file": str(self.env_file) if self.env_file else None},
            ) from exc
        return MappingProxyType(data)

    def snapshot_for(self, props: Mapping[str, str], probe: bool = True) -> EnvironmentSnapshot:
        """Return the environment for one resolution pass.

        Without ``probe``, or when a value mentions ``${env.``, the snapshot
        is taken now. Otherwise a ``DeferredSnapshot`` is returned: an
        ``env.`` token can still arrive through a system property or be
        assembled by a substitution, and it is captured on that first lookup.
        Resolution results are the same either way.
        """
        if probe and not has_environment_reference(props):
            return DeferredSnapshot(self)
        return self.snapshot()


class DeferredSnapshot(Mapping[str, str]):
    """Environment snapshot captured on first access, at most once."""

    def __init__(self, accessor: EnvironmentAccessor) -> None:
        self._accessor = accessor
        self._data: Optional[EnvironmentSnapshot] = None

    @property
    def taken(self) -> bool:
        return self._data is not None

    def _snapshot(self) -> EnvironmentSnapshot:
        if self._data is None:
            self._data = self._accessor.snapshot()
        return self._data

    def __getitem__(self, name: str) -> str:
        return self._snapshot()[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._snapshot())

    def __len__(self) -> int:
        return len(self._snapshot())


__all__ = [
    "ENV_KEY_PREFIX",
    "ENV_TOKEN_PREFIX",
    "DeferredSnapshot",
    "EnvironmentAccessor",
    "EnvironmentSnapshot",
    "SystemProperties",
    "has_environment_reference",
]
