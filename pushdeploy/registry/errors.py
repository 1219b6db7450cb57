"""Registry loading errors."""

from __future__ import annotations

import typing as typ


class RegistryValidationError(Exception):
    """Raised when a registry file cannot be parsed or fails validation.

    Attributes
    ----------
    issues
        Human-readable descriptions of every problem found.

    """

    def __init__(self, issues: typ.Sequence[str]) -> None:
        """Store the collected issues and build a summary message."""
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))
