"""Structured lifecycle events for deployments.

Usage
-----
>>> events = DeploymentEventLogger()
>>> events.log_deployment_started(identifier="app", mode="async")

"""

from __future__ import annotations

import enum
import typing as typ

from pushdeploy.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from .executor import DeploymentResult

logger = get_logger(__name__)


class DeploymentEventType(enum.StrEnum):
    """Structured log event types for the webhook pipeline."""

    DEPLOYMENT_STARTED = "deploy.started"
    DEPLOYMENT_COMPLETED = "deploy.completed"
    DEPLOYMENT_FAILED = "deploy.failed"
    DEPLOYMENT_BUSY = "deploy.busy"
    WEBHOOK_IGNORED = "webhook.ignored"
    WEBHOOK_REJECTED = "webhook.rejected"


class DeploymentEventLogger:
    """Emit structured deployment events via femtologging."""

    def log_deployment_started(self, *, identifier: str, mode: str) -> None:
        """Log the start of a deployment."""
        log_info(
            logger,
            "[%s] repo=%s mode=%s",
            DeploymentEventType.DEPLOYMENT_STARTED,
            identifier,
            mode,
        )

    def log_deployment_finished(
        self,
        *,
        identifier: str,
        result: DeploymentResult,
    ) -> None:
        """Log a finished deployment at INFO on success, ERROR otherwise.

        Parameters
        ----------
        identifier
            Repository identifier.
        result
            Exit code and duration of the run.

        """
        seconds = f"{result.duration.total_seconds():.3f}"
        if result.ok:
            log_info(
                logger,
                "[%s] repo=%s exit_code=0 duration_s=%s",
                DeploymentEventType.DEPLOYMENT_COMPLETED,
                identifier,
                seconds,
            )
            return
        log_error(
            logger,
            "[%s] repo=%s exit_code=%s duration_s=%s",
            DeploymentEventType.DEPLOYMENT_FAILED,
            identifier,
            result.exit_code,
            seconds,
        )

    def log_deployment_busy(self, *, identifier: str) -> None:
        """Log a webhook rejected because a deployment is in flight."""
        log_warning(
            logger,
            "[%s] repo=%s deployment already in progress",
            DeploymentEventType.DEPLOYMENT_BUSY,
            identifier,
        )

    def log_webhook_ignored(self, *, identifier: str, ref: str, branch: str) -> None:
        """Log a push to a ref other than the configured branch."""
        log_info(
            logger,
            "[%s] repo=%s ref=%s branch=%s",
            DeploymentEventType.WEBHOOK_IGNORED,
            identifier,
            ref,
            branch,
        )

    def log_webhook_rejected(self, *, identifier: str, reason: str) -> None:
        """Log a webhook refused before any side effect."""
        log_warning(
            logger,
            "[%s] repo=%s reason=%s",
            DeploymentEventType.WEBHOOK_REJECTED,
            identifier,
            reason,
        )
