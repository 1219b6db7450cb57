"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import falcon.testing
import pytest

from pushdeploy.api.app import AppDependencies, create_app
from pushdeploy.deploy import DeploymentService, DeploymentServiceDependencies, ExecutionMode
from pushdeploy.registry import RepositoryConfig, RepositoryRegistry
from pushdeploy.status import StatusStore, StatusTracker
from tests.helpers.executors import FakeExecutor
from tests.helpers.webhooks import APP_SECRET

if typ.TYPE_CHECKING:
    from pathlib import Path

    import falcon.asgi


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    """Return a working directory standing in for a repository checkout."""
    path = tmp_path / "checkout"
    path.mkdir()
    return path


@pytest.fixture
def app_repo(checkout: Path) -> RepositoryConfig:
    """Return the ``app`` repository deploying the ``main`` branch."""
    return RepositoryConfig(
        identifier="app",
        secret=APP_SECRET,
        working_directory=checkout,
        command="./deploy.sh",
        branch="main",
    )


@pytest.fixture
def registry(app_repo: RepositoryConfig) -> RepositoryRegistry:
    """Return a registry holding only ``app``."""
    return RepositoryRegistry([app_repo])


@pytest.fixture
def status_path(tmp_path: Path) -> Path:
    """Return the snapshot location inside the test directory."""
    return tmp_path / "state" / "status.json"


@pytest.fixture
def store(status_path: Path) -> StatusStore:
    """Return a status store writing to ``status_path``."""
    return StatusStore(status_path)


@pytest.fixture
def tracker(store: StatusStore, registry: RepositoryRegistry) -> StatusTracker:
    """Return an empty tracker for the test registry."""
    return StatusTracker(store, identifiers=registry.identifiers)


@pytest.fixture
def executor() -> FakeExecutor:
    """Return an executor double that succeeds by default."""
    return FakeExecutor()


class AppFactory(typ.Protocol):
    """Callable fixture building an app in the requested mode."""

    def __call__(self, mode: ExecutionMode = ...) -> tuple[falcon.asgi.App, DeploymentService]:
        """Build the app and return it with its deployment service."""
        ...


@pytest.fixture
def build_app(
    registry: RepositoryRegistry,
    tracker: StatusTracker,
    executor: FakeExecutor,
) -> AppFactory:
    """Return a factory wiring the Falcon app around the shared fixtures."""

    def _build(
        mode: ExecutionMode = ExecutionMode.SYNC,
    ) -> tuple[falcon.asgi.App, DeploymentService]:
        service = DeploymentService(
            DeploymentServiceDependencies(tracker=tracker, executor=executor),
            mode=mode,
        )
        app = create_app(
            AppDependencies(registry=registry, tracker=tracker, service=service)
        )
        return app, service

    return _build


@pytest.fixture
def sync_client(build_app: AppFactory) -> falcon.testing.TestClient:
    """Return a test client for an app running deployments synchronously."""
    app, _service = build_app(ExecutionMode.SYNC)
    return falcon.testing.TestClient(app)
