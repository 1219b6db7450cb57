"""Webhook authentication and payload filtering."""

from __future__ import annotations

from .branch import PushPayload, decode_payload, should_deploy
from .errors import InvalidPayloadError
from .signature import (
    SIGNATURE_HEADER,
    SIGNATURE_PREFIX,
    compute_signature,
    verify_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "SIGNATURE_PREFIX",
    "InvalidPayloadError",
    "PushPayload",
    "compute_signature",
    "decode_payload",
    "should_deploy",
    "verify_signature",
]
