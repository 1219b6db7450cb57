"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(RepositoryNotFoundError, handle_repository_not_found)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)
    app.add_error_handler(DeploymentInProgressError, handle_deployment_in_progress)

"""

from __future__ import annotations

import typing as typ

import falcon

from pushdeploy.deploy.errors import DeploymentInProgressError
from pushdeploy.webhook.errors import InvalidPayloadError

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "DeploymentInProgressError",
    "InvalidPayloadError",
    "RepositoryNotFoundError",
    "handle_deployment_in_progress",
    "handle_invalid_payload",
    "handle_repository_not_found",
]


class RepositoryNotFoundError(Exception):
    """Raised when a webhook addresses an identifier missing from the registry.

    Attributes
    ----------
    identifier
        Repository identifier taken from the request path.

    """

    def __init__(self, identifier: str) -> None:
        """Initialise with the unknown identifier."""
        self.identifier = identifier
        super().__init__(f"No repository named {identifier!r} is configured.")


async def handle_repository_not_found(
    _req: Request,
    resp: Response,
    ex: RepositoryNotFoundError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``RepositoryNotFoundError`` to an HTTP 404 JSON response."""
    resp.status = falcon.HTTP_404
    resp.media = {
        "title": "Unknown repository",
        "description": str(ex),
    }


async def handle_invalid_payload(
    _req: Request,
    resp: Response,
    ex: InvalidPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidPayloadError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The decoding failure.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid payload",
        "description": ex.reason,
    }


async def handle_deployment_in_progress(
    _req: Request,
    resp: Response,
    ex: DeploymentInProgressError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``DeploymentInProgressError`` to an HTTP 503 JSON response."""
    resp.status = falcon.HTTP_503
    resp.media = {
        "title": "Deployment in progress",
        "description": str(ex),
    }
