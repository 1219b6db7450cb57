"""Service configuration read from the environment.

Usage
-----
>>> import os
>>> os.environ["PUSHDEPLOY_MODE"] = "sync"
>>> ServiceConfig.from_env().mode
<ExecutionMode.SYNC: 'sync'>

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from pushdeploy.deploy.service import ExecutionMode

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535

DEFAULT_PORT = 6061


@dc.dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the webhook service.

    Attributes
    ----------
    registry_path
        YAML or JSON file describing the configured repositories.
    status_path
        JSON file holding the persisted status snapshot.
    mode
        ``async`` returns 202 before the deploy command finishes;
        ``sync`` waits and answers 200 or 500.
    host
        Bind address.
    port
        Listen port.
    log_level
        Raw log level string; normalized by ``configure_logging``.

    """

    registry_path: Path = Path("deploy.config.yaml")
    status_path: Path = Path("deploy.status.json")
    mode: ExecutionMode = ExecutionMode.ASYNC
    host: str = "0.0.0.0"  # noqa: S104 - webhook receiver listens on all interfaces
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @staticmethod
    def _read_path(env_var: str, default: Path) -> Path:
        raw = os.environ.get(env_var, "")
        return Path(raw.strip()).expanduser() if raw.strip() else default

    @staticmethod
    def parse_port(raw: str) -> int:
        """Parse and range-check a TCP port.

        Raises
        ------
        ValueError
            If ``raw`` is not an integer in 1-65535.

        """
        try:
            port = int(raw)
        except ValueError as exc:
            msg = f"PUSHDEPLOY_PORT must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"PUSHDEPLOY_PORT {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)
        return port

    @staticmethod
    def parse_mode(raw: str) -> ExecutionMode:
        """Parse an execution mode name case-insensitively.

        Raises
        ------
        ValueError
            If ``raw`` is neither ``async`` nor ``sync``.

        """
        try:
            return ExecutionMode(raw.strip().lower())
        except ValueError as exc:
            msg = f"PUSHDEPLOY_MODE must be 'async' or 'sync', got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Create configuration from environment variables.

        Reads ``PUSHDEPLOY_REGISTRY_PATH``, ``PUSHDEPLOY_STATUS_PATH``,
        ``PUSHDEPLOY_MODE``, ``PUSHDEPLOY_HOST``, ``PUSHDEPLOY_PORT``, and
        ``PUSHDEPLOY_LOG_LEVEL``.  Unset or blank variables use defaults.

        Raises
        ------
        ValueError
            If the mode or port is invalid.

        """
        defaults = cls()
        raw_mode = os.environ.get("PUSHDEPLOY_MODE", "")
        raw_port = os.environ.get("PUSHDEPLOY_PORT", "")
        return cls(
            registry_path=cls._read_path("PUSHDEPLOY_REGISTRY_PATH", defaults.registry_path),
            status_path=cls._read_path("PUSHDEPLOY_STATUS_PATH", defaults.status_path),
            mode=cls.parse_mode(raw_mode) if raw_mode.strip() else defaults.mode,
            host=os.environ.get("PUSHDEPLOY_HOST", "").strip() or defaults.host,
            port=cls.parse_port(raw_port) if raw_port.strip() else defaults.port,
            log_level=os.environ.get("PUSHDEPLOY_LOG_LEVEL", "").strip()
            or defaults.log_level,
        )
