"""Errors raised while interpreting webhook payloads."""

from __future__ import annotations


class InvalidPayloadError(Exception):
    """Raised when a webhook body cannot be decoded into a push payload.

    Attributes
    ----------
    reason
        Human-readable description of the decoding failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialise with the decoding failure reason."""
        self.reason = reason
        super().__init__(reason)
