"""Errors raised by the deployment pipeline."""

from __future__ import annotations


class DeploymentInProgressError(Exception):
    """Raised when a webhook arrives while its repository is deploying.

    Attributes
    ----------
    identifier
        Repository identifier whose deployment is still running.

    """

    def __init__(self, identifier: str) -> None:
        """Initialise with the busy repository identifier."""
        self.identifier = identifier
        super().__init__(f"deployment in progress for {identifier!r}")
