"""Command-line helper for validating registry files."""

from __future__ import annotations

import argparse
from pathlib import Path

from .errors import RegistryValidationError
from .loader import load_registry


def main(argv: list[str] | None = None) -> int:
    """Validate a registry file and print a summary.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("registry", type=Path, help="YAML or JSON registry to validate")
    args = parser.parse_args(argv)

    registry_path: Path = args.registry
    try:
        registry = load_registry(registry_path)
    except RegistryValidationError as exc:
        print(f"Registry validation failed for {registry_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    print(f"registry {registry_path} is valid ({len(registry)} repositories)")
    for repo in sorted(registry, key=lambda item: item.identifier):
        print(f"  {repo.identifier}: {repo.ref} -> {repo.working_directory}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
