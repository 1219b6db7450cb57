"""JSON file persistence for the status snapshot.

The snapshot is rewritten in full after every status change.  Writes go to
a sibling temporary file that is then renamed over the target, so a crash
mid-write leaves either the previous snapshot or the new one on disk.
Writes are not fsynced; losing the latest update on power failure is
acceptable because status is best-effort.
"""

from __future__ import annotations

import contextlib
import os
import typing as typ

import msgspec

from pushdeploy.logging import get_logger, log_debug, log_error, log_warning

from .models import decode_snapshot, encode_snapshot

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import DeploymentStatus, Snapshot

__all__ = ["StatusStore"]

logger = get_logger(__name__)


class StatusStore:
    """Load and save the status snapshot at a fixed path.

    Parameters
    ----------
    path
        Location of the JSON snapshot file.

    """

    def __init__(self, path: Path) -> None:
        """Initialise the store for ``path``."""
        self._path = path

    @property
    def path(self) -> Path:
        """Return the snapshot file location."""
        return self._path

    def load(self, identifiers: typ.Collection[str]) -> Snapshot:
        """Read the persisted snapshot, keeping only ``identifiers``.

        A missing file yields an empty snapshot.  An unreadable or corrupt
        file is logged and also yields an empty snapshot; it never aborts
        startup.
        """
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            log_debug(logger, "No status snapshot at %s; starting fresh", self._path)
            return {}
        except OSError as exc:
            log_warning(
                logger,
                "Cannot read status snapshot %s (%s); starting fresh",
                self._path,
                exc,
            )
            return {}

        try:
            snapshot = decode_snapshot(data)
        except msgspec.DecodeError as exc:
            log_warning(
                logger,
                "Discarding corrupt status snapshot %s: %s",
                self._path,
                exc,
            )
            return {}

        known = set(identifiers)
        return {key: value for key, value in snapshot.items() if key in known}

    def save(self, snapshot: typ.Mapping[str, DeploymentStatus]) -> bool:
        """Overwrite the snapshot file with ``snapshot``.

        Returns
        -------
        bool
            ``True`` when the write succeeded.  Failures are logged and
            reported through the return value instead of raised, so the
            in-memory state stays authoritative.

        """
        tmp_path = self._path.with_name(f".{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(encode_snapshot(snapshot))
            os.replace(tmp_path, self._path)
        except OSError as exc:
            log_error(logger, "Failed to persist status snapshot to %s: %s", self._path, exc)
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            return False
        return True
