"""Pushdeploy runtime entrypoint.

This module provides the ASGI application factory used by Granian and the
``pushdeploy`` console script.  The factory loads the repository registry,
restores the persisted status snapshot, and wires the deployment pipeline
into the Falcon app.

Configuration is driven by environment variables (see
:class:`pushdeploy.config.ServiceConfig`):

- ``PUSHDEPLOY_REGISTRY_PATH``: Registry file (default ``deploy.config.yaml``)
- ``PUSHDEPLOY_STATUS_PATH``: Status snapshot (default ``deploy.status.json``)
- ``PUSHDEPLOY_MODE``: ``async`` (default) or ``sync``
- ``PUSHDEPLOY_HOST``: Bind address (default ``0.0.0.0``)
- ``PUSHDEPLOY_PORT``: Listen port (default ``6061``)
- ``PUSHDEPLOY_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m pushdeploy.runtime``.
"""

from __future__ import annotations

import typing as typ

from pushdeploy.config import ServiceConfig
from pushdeploy.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["build_app", "create_app", "main"]

logger = get_logger(__name__)


def build_app(config: ServiceConfig) -> falcon.asgi.App:
    """Build the Falcon app for ``config``.

    Raises
    ------
    RegistryValidationError
        If the registry file is missing or invalid.

    """
    from pushdeploy.api.app import AppDependencies
    from pushdeploy.api.app import create_app as _create_api_app
    from pushdeploy.deploy import (
        DeploymentEventLogger,
        DeploymentService,
        DeploymentServiceDependencies,
        ShellExecutor,
    )
    from pushdeploy.registry import load_registry
    from pushdeploy.status import StatusStore, StatusTracker

    registry = load_registry(config.registry_path)
    tracker = StatusTracker.from_store(
        StatusStore(config.status_path),
        identifiers=registry.identifiers,
    )
    events = DeploymentEventLogger()
    service = DeploymentService(
        DeploymentServiceDependencies(tracker=tracker, executor=ShellExecutor()),
        mode=config.mode,
        event_logger=events,
    )
    log_info(
        logger,
        "Loaded %d repositories from %s (mode=%s, status=%s)",
        len(registry),
        config.registry_path,
        config.mode,
        config.status_path,
    )
    return _create_api_app(
        AppDependencies(
            registry=registry,
            tracker=tracker,
            service=service,
            event_logger=events,
        )
    )


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    return build_app(ServiceConfig.from_env())


def _load_config() -> ServiceConfig:
    try:
        return ServiceConfig.from_env()
    except ValueError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc


def main() -> None:
    """Start the Pushdeploy server using Granian.

    The registry is validated once up front so a broken configuration
    fails fast instead of inside the server's worker.
    """
    from granian import Granian
    from granian.constants import Interfaces

    from pushdeploy.registry import RegistryValidationError, load_registry

    config = _load_config()

    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid PUSHDEPLOY_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    try:
        load_registry(config.registry_path)
    except RegistryValidationError as exc:
        log_error(logger, "Cannot load registry %s: %s", config.registry_path, exc)
        raise SystemExit(1) from exc

    log_info(
        logger,
        "Starting Pushdeploy on %s:%d (log_level=%s)",
        config.host,
        config.port,
        normalized_level,
    )

    server = Granian(
        "pushdeploy.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
        # Execution locks and status live in process memory.
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
