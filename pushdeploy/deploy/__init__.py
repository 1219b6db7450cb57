"""Deploy command execution and the per-repository pipeline."""

from __future__ import annotations

from .errors import DeploymentInProgressError
from .executor import DeploymentExecutor, DeploymentResult, ShellExecutor
from .observability import DeploymentEventLogger, DeploymentEventType
from .service import DeploymentService, DeploymentServiceDependencies, ExecutionMode

__all__ = [
    "DeploymentEventLogger",
    "DeploymentEventType",
    "DeploymentExecutor",
    "DeploymentInProgressError",
    "DeploymentResult",
    "DeploymentService",
    "DeploymentServiceDependencies",
    "ExecutionMode",
    "ShellExecutor",
]
