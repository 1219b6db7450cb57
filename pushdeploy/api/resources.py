"""Falcon resources for webhooks and status reporting.

Routes
------
``POST /{repo_id}``
    Authenticate a webhook and trigger the repository's deployment.
``GET /status.json``
    Current status snapshot as JSON.
``GET /`` and ``GET /index.html``
    Human-readable status page.

"""

from __future__ import annotations

import typing as typ

import falcon
import msgspec

from pushdeploy.api.errors import RepositoryNotFoundError
from pushdeploy.status.models import encode_snapshot
from pushdeploy.status.page import render_status_page
from pushdeploy.webhook import (
    SIGNATURE_HEADER,
    decode_payload,
    should_deploy,
    verify_signature,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from pushdeploy.deploy.observability import DeploymentEventLogger
    from pushdeploy.deploy.service import DeploymentService
    from pushdeploy.registry.models import RepositoryRegistry
    from pushdeploy.status.tracker import StatusTracker

__all__ = ["StatusFeedResource", "StatusPageResource", "WebhookResource"]

EVENT_HEADER = "X-GitHub-Event"


class WebhookResource:
    """Resource receiving push notifications for one repository each.

    Requests are checked in order: known identifier, valid signature,
    decodable payload, matching branch.  Nothing is recorded or executed
    until every check passes.

    """

    def __init__(
        self,
        registry: RepositoryRegistry,
        service: DeploymentService,
        event_logger: DeploymentEventLogger,
    ) -> None:
        """Configure the resource with the registry and deployment service."""
        self._registry = registry
        self._service = service
        self._events = event_logger

    async def on_post(self, req: Request, resp: Response, *, repo_id: str) -> None:
        """Handle ``POST /{repo_id}``.

        Parameters
        ----------
        req
            Falcon request carrying the signed webhook body.
        resp
            Falcon response object.
        repo_id
            Repository identifier from the URL path.

        """
        repo = self._registry.get(repo_id)
        if repo is None:
            raise RepositoryNotFoundError(repo_id)

        body = await req.stream.read()
        if not verify_signature(req.get_header(SIGNATURE_HEADER), body, repo.secret):
            self._events.log_webhook_rejected(identifier=repo_id, reason="bad signature")
            raise falcon.HTTPForbidden()

        if (req.get_header(EVENT_HEADER) or "").lower() == "ping":
            resp.media = {"status": "pong"}
            resp.status = falcon.HTTP_200
            return

        payload = decode_payload(body)
        if not should_deploy(payload, repo.branch):
            ref = "" if payload.ref is msgspec.UNSET else payload.ref
            self._events.log_webhook_ignored(identifier=repo_id, ref=ref, branch=repo.branch)
            resp.media = {"status": "ignored"}
            resp.status = falcon.HTTP_200
            return

        result = await self._service.trigger(repo)
        if result is None:
            resp.media = {"status": "accepted"}
            resp.status = falcon.HTTP_202
        elif result.ok:
            resp.media = {"status": "ok"}
            resp.status = falcon.HTTP_200
        else:
            resp.media = {"status": "failed"}
            resp.status = falcon.HTTP_500

    async def on_get(self, _req: Request, _resp: Response, *, repo_id: str) -> None:
        """Reject reads of webhook paths as not found."""
        raise falcon.HTTPNotFound()


class StatusFeedResource:
    """``GET /status.json`` returning the status snapshot."""

    def __init__(self, tracker: StatusTracker) -> None:
        """Configure the resource with the status tracker."""
        self._tracker = tracker

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Serve the snapshot with camelCase keys and ISO-8601 values."""
        resp.content_type = falcon.MEDIA_JSON
        resp.data = encode_snapshot(self._tracker.snapshot())
        resp.status = falcon.HTTP_200

    async def on_post(self, req: Request, _resp: Response) -> None:
        """Treat webhooks sent to the feed path as an unknown repository."""
        raise RepositoryNotFoundError(req.path.strip("/"))


class StatusPageResource:
    """``GET /`` rendering the HTML status page."""

    def __init__(self, tracker: StatusTracker, registry: RepositoryRegistry) -> None:
        """Configure the resource with the tracker and registry."""
        self._tracker = tracker
        self._registry = registry

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Render the page for all registered repositories."""
        resp.content_type = falcon.MEDIA_HTML
        resp.text = render_status_page(
            self._tracker.snapshot(),
            identifiers=self._registry.identifiers,
        )
        resp.status = falcon.HTTP_200

    async def on_post(self, req: Request, _resp: Response) -> None:
        """Treat webhooks sent to the page paths as an unknown repository."""
        raise RepositoryNotFoundError(req.path.strip("/"))
