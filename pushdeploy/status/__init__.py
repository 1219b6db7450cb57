"""Deployment status tracking, persistence, and rendering."""

from __future__ import annotations

from .models import (
    FAILURE_MARKER,
    DeploymentStatus,
    Snapshot,
    decode_snapshot,
    encode_snapshot,
)
from .page import render_status_page
from .persistence import StatusStore
from .tracker import StatusTracker

__all__ = [
    "FAILURE_MARKER",
    "DeploymentStatus",
    "Snapshot",
    "StatusStore",
    "StatusTracker",
    "decode_snapshot",
    "encode_snapshot",
    "render_status_page",
]
