"""Deployment status records and their JSON encoding."""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import typing as typ

import msgspec

FAILURE_MARKER = "deployment failed"


class DeploymentStatus(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    rename="camel",
):
    """Latest deployment outcome for one repository.

    Records are immutable and replaced wholesale on every update, so a
    reader never observes a half-applied change.

    Attributes
    ----------
    last_attempt
        When the most recent deployment started.
    last_success
        When the most recent successful deployment finished.
    last_exit_code
        Exit code of the most recent finished deployment, ``None`` when
        the command could not be launched.
    last_duration
        Wall-clock duration of the most recent finished deployment.
    last_error
        Generic failure marker for the most recent deployment; cleared
        when a new attempt starts.

    """

    last_attempt: dt.datetime | None = None
    last_success: dt.datetime | None = None
    last_exit_code: int | None = None
    last_duration: dt.timedelta | None = None
    last_error: str | None = None


Snapshot: typ.TypeAlias = dict[str, DeploymentStatus]

_encoder = msgspec.json.Encoder()
_decoder = msgspec.json.Decoder(dict[str, DeploymentStatus])


def encode_snapshot(snapshot: typ.Mapping[str, DeploymentStatus]) -> bytes:
    """Encode a snapshot as a JSON object keyed by identifier."""
    return _encoder.encode(dict(sorted(snapshot.items())))


def decode_snapshot(data: bytes) -> Snapshot:
    """Decode a JSON snapshot.

    Raises
    ------
    msgspec.DecodeError
        If ``data`` is not valid JSON or does not match the snapshot shape.

    """
    return _decoder.decode(data)
