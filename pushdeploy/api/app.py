"""Application factory for the Pushdeploy Falcon ASGI application.

Usage
-----
Build the app from already-constructed collaborators::

    from pushdeploy.api.app import AppDependencies, create_app

    deps = AppDependencies(registry=registry, tracker=tracker, service=service)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from pushdeploy.api.errors import (
    DeploymentInProgressError,
    InvalidPayloadError,
    RepositoryNotFoundError,
    handle_deployment_in_progress,
    handle_invalid_payload,
    handle_repository_not_found,
)
from pushdeploy.api.middleware import DeploymentDrainMiddleware
from pushdeploy.api.resources import (
    StatusFeedResource,
    StatusPageResource,
    WebhookResource,
)
from pushdeploy.deploy.observability import DeploymentEventLogger

if typ.TYPE_CHECKING:
    from pushdeploy.deploy.service import DeploymentService
    from pushdeploy.registry.models import RepositoryRegistry
    from pushdeploy.status.tracker import StatusTracker

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    registry
        Repository registry consulted for every webhook.
    tracker
        Status tracker backing the status endpoints.
    service
        Deployment pipeline triggered by authenticated webhooks.
    event_logger
        Optional lifecycle event emitter.

    """

    registry: RepositoryRegistry
    tracker: StatusTracker
    service: DeploymentService
    event_logger: DeploymentEventLogger | None = None


def create_app(dependencies: AppDependencies) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Registry, tracker, and deployment service.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    events = dependencies.event_logger or DeploymentEventLogger()
    app = falcon.asgi.App(  # type: ignore[no-matching-overload]  # Falcon stubs
        middleware=[DeploymentDrainMiddleware(dependencies.service)],
    )

    status_page = StatusPageResource(dependencies.tracker, dependencies.registry)
    app.add_route("/", status_page)
    app.add_route("/index.html", status_page)
    app.add_route("/status.json", StatusFeedResource(dependencies.tracker))
    app.add_route(
        "/{repo_id}",
        WebhookResource(dependencies.registry, dependencies.service, events),
    )

    app.add_error_handler(RepositoryNotFoundError, handle_repository_not_found)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)
    app.add_error_handler(DeploymentInProgressError, handle_deployment_in_progress)

    return app
