"""Shell execution of deploy commands.

The command runs through the system shell with the repository checkout as
its working directory.  Standard output and standard error are inherited
from the service process so deploy logs land in the service's own streams;
nothing is captured or returned to the webhook caller.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import datetime as dt
import time
import typing as typ

from pushdeploy.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    from pathlib import Path

__all__ = ["DeploymentExecutor", "DeploymentResult", "ShellExecutor"]

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class DeploymentResult:
    """Outcome of one deploy command run.

    Attributes
    ----------
    exit_code
        Process exit code.  Negative when the process was killed by a
        signal; ``None`` when it could not be launched.
    duration
        Wall-clock time from launch attempt to exit.

    """

    exit_code: int | None
    duration: dt.timedelta

    @property
    def ok(self) -> bool:
        """Return whether the command exited with status 0."""
        return self.exit_code == 0


@typ.runtime_checkable
class DeploymentExecutor(typ.Protocol):
    """Protocol for running a deploy command in a working directory."""

    async def run(self, working_directory: Path, command: str) -> DeploymentResult:
        """Run ``command`` in ``working_directory`` and report its outcome."""
        ...


class ShellExecutor:
    """Run deploy commands with ``asyncio.create_subprocess_shell``."""

    async def run(self, working_directory: Path, command: str) -> DeploymentResult:
        """Run ``command`` under the shell rooted at ``working_directory``.

        Launch failures such as a missing working directory are logged and
        reported as ``exit_code=None`` rather than raised.
        """
        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=working_directory,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            log_error(
                logger,
                "Failed to launch deploy command in %s: %s",
                working_directory,
                exc,
            )
            return DeploymentResult(exit_code=None, duration=_elapsed(started))

        exit_code = await process.wait()
        return DeploymentResult(exit_code=exit_code, duration=_elapsed(started))


def _elapsed(started: float) -> dt.timedelta:
    return dt.timedelta(seconds=time.monotonic() - started)
