"""In-memory deployment status tracking with persistence flushes.

``StatusTracker`` owns the identifier-to-status map.  Every mutation swaps
in a new frozen record and then writes the complete snapshot through the
:class:`~pushdeploy.status.persistence.StatusStore`.  A single lock covers
both the swap and the flush so that snapshots reach disk in mutation order.

Usage
-----
>>> tracker = StatusTracker(store, identifiers={"app"})
>>> await tracker.record_attempt("app", utcnow())
>>> await tracker.record_result("app", 0, dt.timedelta(seconds=3))

"""

from __future__ import annotations

import asyncio
import typing as typ

import msgspec

from pushdeploy.common.time import utcnow

from .models import FAILURE_MARKER, DeploymentStatus

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import Snapshot
    from .persistence import StatusStore

__all__ = ["StatusTracker"]


class StatusTracker:
    """Track the latest deployment outcome per repository identifier.

    Parameters
    ----------
    store
        Persistence backend flushed after every mutation.
    identifiers
        Identifiers currently in the registry.  Only these are written to
        the snapshot.
    initial
        Previously persisted snapshot to resume from.

    """

    def __init__(
        self,
        store: StatusStore,
        *,
        identifiers: typ.Collection[str],
        initial: typ.Mapping[str, DeploymentStatus] | None = None,
    ) -> None:
        """Initialise the tracker from an optional persisted snapshot."""
        self._store = store
        self._identifiers = frozenset(identifiers)
        self._statuses: Snapshot = {
            key: value
            for key, value in (initial or {}).items()
            if key in self._identifiers
        }
        self._lock = asyncio.Lock()

    @classmethod
    def from_store(
        cls,
        store: StatusStore,
        *,
        identifiers: typ.Collection[str],
    ) -> StatusTracker:
        """Build a tracker seeded with the snapshot persisted in ``store``."""
        return cls(
            store,
            identifiers=identifiers,
            initial=store.load(identifiers),
        )

    def get(self, identifier: str) -> DeploymentStatus | None:
        """Return the current record for ``identifier``, if any."""
        return self._statuses.get(identifier)

    def snapshot(self) -> Snapshot:
        """Return a copy of the current identifier-to-status map."""
        return dict(self._statuses)

    async def record_attempt(self, identifier: str, timestamp: dt.datetime) -> None:
        """Mark the start of a deployment and clear the previous error."""
        async with self._lock:
            current = self._statuses.get(identifier) or DeploymentStatus()
            self._statuses[identifier] = msgspec.structs.replace(
                current,
                last_attempt=timestamp,
                last_error=None,
            )
            await self._flush()

    async def record_result(
        self,
        identifier: str,
        exit_code: int | None,
        duration: dt.timedelta,
        *,
        completed_at: dt.datetime | None = None,
    ) -> None:
        """Record the outcome of a finished deployment.

        Parameters
        ----------
        identifier
            Repository identifier.
        exit_code
            Process exit code; ``None`` when the command never ran.
        duration
            Wall-clock runtime of the command.
        completed_at
            Completion timestamp used for ``last_success``; defaults to
            the current UTC time.

        """
        async with self._lock:
            current = self._statuses.get(identifier) or DeploymentStatus()
            if exit_code == 0:
                updated = msgspec.structs.replace(
                    current,
                    last_exit_code=exit_code,
                    last_duration=duration,
                    last_success=completed_at or utcnow(),
                    last_error=None,
                )
            else:
                updated = msgspec.structs.replace(
                    current,
                    last_exit_code=exit_code,
                    last_duration=duration,
                    last_error=FAILURE_MARKER,
                )
            self._statuses[identifier] = updated
            await self._flush()

    async def _flush(self) -> None:
        """Write the registered part of the map; caller holds the lock."""
        snapshot = {
            key: value
            for key, value in self._statuses.items()
            if key in self._identifiers
        }
        await asyncio.to_thread(self._store.save, snapshot)
