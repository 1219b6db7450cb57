"""Per-repository deployment pipeline.

``DeploymentService`` sequences one deployment: it takes the repository's
execution lock, records the attempt, runs the command, records the result,
and releases the lock.  Deployments for the same repository never overlap;
a second trigger while one is running is refused with
:class:`~pushdeploy.deploy.errors.DeploymentInProgressError`.  Different
repositories deploy in parallel without a global cap.

Every run happens on a background task that owns the repository lock.  In
``async`` mode ``trigger`` returns as soon as the attempt is recorded.  In
``sync`` mode ``trigger`` awaits the run through ``asyncio.shield``, so a
cancelled request leaves the deployment running to completion.

Usage
-----
>>> service = DeploymentService(
...     DeploymentServiceDependencies(tracker=tracker, executor=ShellExecutor()),
...     mode=ExecutionMode.ASYNC,
... )
>>> await service.trigger(registry.get("app"))
>>> await service.join()

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import datetime as dt
import enum
import time
import typing as typ

from pushdeploy.common.time import utcnow
from pushdeploy.logging import get_logger, log_exception

from .errors import DeploymentInProgressError
from .executor import DeploymentResult
from .observability import DeploymentEventLogger

if typ.TYPE_CHECKING:
    from pushdeploy.registry.models import RepositoryConfig
    from pushdeploy.status.tracker import StatusTracker

    from .executor import DeploymentExecutor

__all__ = [
    "DeploymentService",
    "DeploymentServiceDependencies",
    "ExecutionMode",
]

logger = get_logger(__name__)


class ExecutionMode(enum.StrEnum):
    """Whether the webhook response waits for the deploy command."""

    ASYNC = "async"
    SYNC = "sync"


@dc.dataclass(frozen=True, slots=True)
class DeploymentServiceDependencies:
    """Collaborators for :class:`DeploymentService`.

    Attributes
    ----------
    tracker
        Status tracker receiving attempt and result updates.
    executor
        Runs the deploy command.

    """

    tracker: StatusTracker
    executor: DeploymentExecutor


class DeploymentService:
    """Run deployments with per-repository serialization."""

    def __init__(
        self,
        dependencies: DeploymentServiceDependencies,
        *,
        mode: ExecutionMode = ExecutionMode.ASYNC,
        event_logger: DeploymentEventLogger | None = None,
    ) -> None:
        """Configure the service.

        Parameters
        ----------
        dependencies
            Tracker and executor collaborators.
        mode
            Deployment-wide execution mode.
        event_logger
            Lifecycle event emitter; a default instance is used when omitted.

        """
        self._tracker = dependencies.tracker
        self._executor = dependencies.executor
        self._mode = mode
        self._events = event_logger or DeploymentEventLogger()
        self._locks: dict[str, asyncio.Lock] = {}
        self._tasks: set[asyncio.Task[DeploymentResult]] = set()

    @property
    def mode(self) -> ExecutionMode:
        """Return the configured execution mode."""
        return self._mode

    def is_busy(self, identifier: str) -> bool:
        """Return whether a deployment for ``identifier`` is in flight."""
        lock = self._locks.get(identifier)
        return lock is not None and lock.locked()

    async def trigger(self, repo: RepositoryConfig) -> DeploymentResult | None:
        """Start a deployment for ``repo``.

        Returns
        -------
        DeploymentResult | None
            The finished result in ``sync`` mode; ``None`` in ``async``
            mode, where the result reaches the tracker later.

        Raises
        ------
        DeploymentInProgressError
            If a deployment for the same repository is still running.

        """
        lock = self._locks.setdefault(repo.identifier, asyncio.Lock())
        if lock.locked():
            self._events.log_deployment_busy(identifier=repo.identifier)
            raise DeploymentInProgressError(repo.identifier)

        # An unlocked lock is acquired without yielding, so no other
        # request can slip in between the check and the acquire.
        await lock.acquire()
        try:
            await self._tracker.record_attempt(repo.identifier, utcnow())
        except BaseException:
            lock.release()
            raise

        self._events.log_deployment_started(identifier=repo.identifier, mode=self._mode)

        task = asyncio.create_task(
            self._execute(repo, lock),
            name=f"deploy:{repo.identifier}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

        if self._mode is ExecutionMode.ASYNC:
            return None
        # The run owns the lock; a cancelled request must not stop it early.
        return await asyncio.shield(task)

    async def join(self) -> None:
        """Wait until every background deployment has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task[DeploymentResult]) -> None:
        """Forget a finished background task and surface unexpected errors."""
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_exception(logger, f"Background deployment {task.get_name()!r} failed", exc)

    async def _execute(
        self,
        repo: RepositoryConfig,
        lock: asyncio.Lock,
    ) -> DeploymentResult:
        """Run the command and record its result; always releases ``lock``."""
        started = time.monotonic()
        try:
            try:
                result = await self._executor.run(repo.working_directory, repo.command)
            except Exception as exc:  # noqa: BLE001 - any executor failure is a failed deploy
                log_exception(
                    logger,
                    f"Deploy executor failed for {repo.identifier!r}",
                    exc,
                )
                result = DeploymentResult(
                    exit_code=None,
                    duration=dt.timedelta(seconds=time.monotonic() - started),
                )
            self._events.log_deployment_finished(identifier=repo.identifier, result=result)
            await self._tracker.record_result(
                repo.identifier,
                result.exit_code,
                result.duration,
            )
            return result
        finally:
            lock.release()