"""YAML loader for the repository registry file.

YAML 1.2 is a superset of JSON, so a ``deploy.config.json`` style file
loads through the same path as a hand-written YAML registry.
"""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import RegistryValidationError
from .models import RegistryFile, RepositoryConfig, RepositoryEntry, RepositoryRegistry

YAML_VERSION = (1, 2)

# Paths served by the status endpoints; they can never receive a webhook.
RESERVED_IDENTIFIERS = frozenset({"index.html", "status.json"})


def load_registry(path: Path | str) -> RepositoryRegistry:
    """Parse, validate, and index a registry file."""
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise RegistryValidationError([f"failed to parse registry: {exc}"]) from exc

    if loaded is None:
        raise RegistryValidationError(["registry file is empty"])

    try:
        registry_file = msgspec.convert(loaded, type=RegistryFile)
    except msgspec.ValidationError as exc:
        raise RegistryValidationError([f"schema validation failed: {exc}"]) from exc

    return validate_registry(registry_file)


def validate_registry(registry_file: RegistryFile) -> RepositoryRegistry:
    """Check semantic rules and build the registry.

    Raises
    ------
    RegistryValidationError
        If any identifier or entry is unusable.  All issues are reported
        together rather than stopping at the first.

    """
    issues: list[str] = []
    for identifier, entry in registry_file.repos.items():
        issues.extend(_entry_issues(identifier, entry))

    if issues:
        raise RegistryValidationError(issues)

    return RepositoryRegistry(
        RepositoryConfig.from_entry(identifier, entry)
        for identifier, entry in registry_file.repos.items()
    )


def _entry_issues(identifier: str, entry: RepositoryEntry) -> list[str]:
    issues: list[str] = []
    if not identifier.strip():
        issues.append("repository identifier must not be empty")
    elif "/" in identifier:
        issues.append(f"repository identifier {identifier!r} must not contain '/'")
    elif identifier in RESERVED_IDENTIFIERS:
        issues.append(f"repository identifier {identifier!r} is reserved")

    issues.extend(
        f"repos.{identifier}.{name} must not be empty"
        for name, value in (
            ("secret", entry.secret),
            ("path", entry.path),
            ("cmd", entry.cmd),
            ("branch", entry.branch),
        )
        if not value.strip()
    )
    return issues


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
