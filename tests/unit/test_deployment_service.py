"""Unit tests for DeploymentService sequencing and serialization."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from pushdeploy.deploy import (
    DeploymentInProgressError,
    DeploymentService,
    DeploymentServiceDependencies,
    ExecutionMode,
)
from pushdeploy.registry import RepositoryConfig
from pushdeploy.status.models import FAILURE_MARKER
from pushdeploy.status.tracker import StatusTracker
from tests.helpers.executors import FakeExecutor, RaisingExecutor

if typ.TYPE_CHECKING:
    from pushdeploy.status.persistence import StatusStore


def _service(
    tracker: StatusTracker,
    executor: object,
    mode: ExecutionMode,
) -> DeploymentService:
    return DeploymentService(
        DeploymentServiceDependencies(tracker=tracker, executor=executor),  # type: ignore[arg-type]
        mode=mode,
    )


class TestSyncMode:
    """Tests for synchronous deployments."""

    @pytest.mark.asyncio
    async def test_returns_result_and_records_it(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """The result is returned and recorded before trigger returns."""
        executor = FakeExecutor([0])
        service = _service(tracker, executor, ExecutionMode.SYNC)

        result = await service.trigger(app_repo)

        assert result is not None
        assert result.ok
        assert executor.calls == [(app_repo.working_directory, app_repo.command)]
        status = tracker.get("app")
        assert status is not None
        assert status.last_exit_code == 0
        assert status.last_success is not None
        assert not service.is_busy("app")

    @pytest.mark.asyncio
    async def test_failure_is_recorded(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """A non-zero exit is recorded with the generic marker."""
        service = _service(tracker, FakeExecutor([4]), ExecutionMode.SYNC)

        result = await service.trigger(app_repo)

        assert result is not None
        assert result.exit_code == 4
        status = tracker.get("app")
        assert status is not None
        assert status.last_error == FAILURE_MARKER
        assert status.last_success is None


    @pytest.mark.asyncio
    async def test_cancelled_request_does_not_release_lock(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """Cancelling a waiting caller leaves the run holding the lock to the end."""
        gate = asyncio.Event()
        executor = FakeExecutor([0], gate=gate)
        service = _service(tracker, executor, ExecutionMode.SYNC)

        caller = asyncio.create_task(service.trigger(app_repo))
        await asyncio.sleep(0.01)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        assert service.is_busy("app")
        with pytest.raises(DeploymentInProgressError):
            await service.trigger(app_repo)

        gate.set()
        await service.join()

        assert len(executor.calls) == 1
        assert executor.max_active == 1
        assert not service.is_busy("app")
        status = tracker.get("app")
        assert status is not None
        assert status.last_exit_code == 0
        assert status.last_success is not None


class TestAsyncMode:
    """Tests for background deployments."""

    @pytest.mark.asyncio
    async def test_returns_before_completion(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """Trigger records the attempt and returns while the run continues."""
        gate = asyncio.Event()
        executor = FakeExecutor([0], gate=gate)
        service = _service(tracker, executor, ExecutionMode.ASYNC)

        assert await service.trigger(app_repo) is None
        await asyncio.sleep(0.01)

        status = tracker.get("app")
        assert status is not None
        assert status.last_attempt is not None
        assert status.last_exit_code is None
        assert service.is_busy("app")

        gate.set()
        await service.join()

        status = tracker.get("app")
        assert status is not None
        assert status.last_exit_code == 0
        assert not service.is_busy("app")

    @pytest.mark.asyncio
    async def test_overlapping_trigger_is_rejected(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """A second trigger for a busy repository raises without running."""
        gate = asyncio.Event()
        executor = FakeExecutor(gate=gate)
        service = _service(tracker, executor, ExecutionMode.ASYNC)

        await service.trigger(app_repo)
        await asyncio.sleep(0.01)
        with pytest.raises(DeploymentInProgressError):
            await service.trigger(app_repo)

        gate.set()
        await service.join()
        assert len(executor.calls) == 1
        assert executor.max_active == 1

    @pytest.mark.asyncio
    async def test_lock_released_after_completion(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """Sequential triggers run once each and record the latest result."""
        executor = FakeExecutor([0, 3])
        service = _service(tracker, executor, ExecutionMode.ASYNC)

        await service.trigger(app_repo)
        await service.join()
        await service.trigger(app_repo)
        await service.join()

        assert len(executor.calls) == 2
        status = tracker.get("app")
        assert status is not None
        assert status.last_exit_code == 3
        assert status.last_error == FAILURE_MARKER

    @pytest.mark.asyncio
    async def test_different_repositories_run_in_parallel(
        self,
        store: StatusStore,
        app_repo: RepositoryConfig,
    ) -> None:
        """Deployments for distinct identifiers are not serialized."""
        other = RepositoryConfig(
            identifier="api",
            secret=b"t",
            working_directory=app_repo.working_directory,
            command="./other.sh",
        )
        tracker = StatusTracker(store, identifiers={"app", "api"})
        gate = asyncio.Event()
        executor = FakeExecutor(gate=gate)
        service = _service(tracker, executor, ExecutionMode.ASYNC)

        await service.trigger(app_repo)
        await service.trigger(other)
        await asyncio.sleep(0.01)

        assert executor.active == 2
        gate.set()
        await service.join()
        assert set(tracker.snapshot()) == {"app", "api"}

    @pytest.mark.asyncio
    async def test_executor_exception_is_recorded_as_failure(
        self, tracker: StatusTracker, app_repo: RepositoryConfig
    ) -> None:
        """An unexpected executor error still reaches the tracker."""
        executor = RaisingExecutor()
        service = _service(tracker, executor, ExecutionMode.ASYNC)

        await service.trigger(app_repo)
        await service.join()

        status = tracker.get("app")
        assert status is not None
        assert status.last_exit_code is None
        assert status.last_error == FAILURE_MARKER
        assert not service.is_busy("app")
