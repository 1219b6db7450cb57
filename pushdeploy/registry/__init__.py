"""Repository registry: per-repository deployment configuration.

Load a registry file::

    >>> from pushdeploy.registry import load_registry
    >>> registry = load_registry("deploy.config.yaml")
    >>> registry.get("app")

"""

from __future__ import annotations

from .errors import RegistryValidationError
from .loader import load_registry, validate_registry
from .models import (
    DEFAULT_BRANCH,
    RegistryFile,
    RepositoryConfig,
    RepositoryEntry,
    RepositoryRegistry,
)

__all__ = [
    "DEFAULT_BRANCH",
    "RegistryFile",
    "RegistryValidationError",
    "RepositoryConfig",
    "RepositoryEntry",
    "RepositoryRegistry",
    "load_registry",
    "validate_registry",
]
