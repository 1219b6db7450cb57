"""Lifespan middleware that lets in-flight deployments finish on shutdown.

Deployments are never cancelled once started, so the ASGI shutdown event
waits for background deploy tasks before the server exits.

Usage
-----
>>> app = falcon.asgi.App(middleware=[DeploymentDrainMiddleware(service)])

"""

from __future__ import annotations

import typing as typ

from pushdeploy.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from pushdeploy.deploy.service import DeploymentService

__all__ = ["DeploymentDrainMiddleware"]

logger = get_logger(__name__)


class DeploymentDrainMiddleware:
    """Falcon middleware awaiting background deployments at shutdown.

    Parameters
    ----------
    service
        Deployment service whose background tasks are drained.

    """

    def __init__(self, service: DeploymentService) -> None:
        """Initialise the middleware with the deployment service."""
        self._service = service

    async def process_shutdown(
        self,
        _scope: dict[str, typ.Any],
        _event: dict[str, typ.Any],
    ) -> None:
        """Wait for running deployments before the server stops."""
        log_info(logger, "Waiting for in-flight deployments before shutdown")
        await self._service.join()
