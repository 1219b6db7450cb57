"""Typed repository registry structures."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec

DEFAULT_BRANCH = "main"


class RepositoryEntry(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Raw registry entry as written in the configuration file.

    Attributes
    ----------
    secret : str
        Shared secret used to sign webhook payloads.
    path : str
        Working directory of the repository checkout.
    cmd : str
        Shell command line run for each deployment.
    branch : str
        Branch whose pushes trigger a deployment.

    """

    secret: str
    path: str
    cmd: str
    branch: str = DEFAULT_BRANCH


class RegistryFile(msgspec.Struct, kw_only=True):
    """Top-level layout of a registry configuration file."""

    repos: dict[str, RepositoryEntry] = msgspec.field(default_factory=dict)


class RepositoryConfig(msgspec.Struct, frozen=True, kw_only=True):
    """Deployment configuration for one repository identifier.

    Attributes
    ----------
    identifier : str
        URL path segment that addresses this repository.
    secret : bytes
        Shared secret as raw bytes for HMAC computation.
    working_directory : Path
        Directory the deploy command runs in.
    command : str
        Shell command line.
    branch : str
        Target branch; pushes to other refs are ignored.

    """

    identifier: str
    secret: bytes
    working_directory: Path
    command: str
    branch: str = DEFAULT_BRANCH

    @property
    def ref(self) -> str:
        """Return the fully qualified git ref for the target branch."""
        return f"refs/heads/{self.branch}"

    @classmethod
    def from_entry(cls, identifier: str, entry: RepositoryEntry) -> RepositoryConfig:
        """Build an immutable config from a validated file entry."""
        return cls(
            identifier=identifier,
            secret=entry.secret.encode("utf-8"),
            working_directory=Path(entry.path).expanduser(),
            command=entry.cmd,
            branch=entry.branch,
        )


class RepositoryRegistry:
    """Read-only mapping from repository identifier to its config."""

    def __init__(self, repositories: typ.Iterable[RepositoryConfig] = ()) -> None:
        """Index ``repositories`` by identifier.

        Raises
        ------
        ValueError
            If two configs share the same identifier.

        """
        index: dict[str, RepositoryConfig] = {}
        for repo in repositories:
            if repo.identifier in index:
                msg = f"duplicate repository identifier: {repo.identifier!r}"
                raise ValueError(msg)
            index[repo.identifier] = repo
        self._repositories = index

    def get(self, identifier: str) -> RepositoryConfig | None:
        """Return the config for ``identifier`` or ``None`` when unknown."""
        return self._repositories.get(identifier)

    @property
    def identifiers(self) -> frozenset[str]:
        """Return the set of registered identifiers."""
        return frozenset(self._repositories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._repositories

    def __iter__(self) -> typ.Iterator[RepositoryConfig]:
        return iter(self._repositories.values())

    def __len__(self) -> int:
        return len(self._repositories)
