"""Push payload decoding and branch filtering.

Only the ``ref`` field of a push notification matters for deciding whether
to deploy, so the payload is decoded into a narrow struct and every other
key is ignored.  A ``ref`` with any type other than string is rejected.
"""

from __future__ import annotations

import msgspec

from .errors import InvalidPayloadError

__all__ = ["PushPayload", "decode_payload", "should_deploy"]


class PushPayload(msgspec.Struct, kw_only=True):
    """Fields of a webhook notification used by the branch filter.

    Attributes
    ----------
    ref : str | msgspec.UnsetType
        Fully qualified ref that was pushed, e.g. ``refs/heads/main``.
        Unset for manually triggered or ref-less notifications.

    """

    ref: str | msgspec.UnsetType = msgspec.UNSET


_decoder = msgspec.json.Decoder(PushPayload)


def decode_payload(body: bytes) -> PushPayload:
    """Decode a webhook body into a :class:`PushPayload`.

    Raises
    ------
    InvalidPayloadError
        If the body is not a JSON object or ``ref`` is not a string.

    """
    try:
        return _decoder.decode(body)
    except msgspec.DecodeError as exc:
        raise InvalidPayloadError(str(exc)) from exc


def should_deploy(payload: PushPayload, branch: str) -> bool:
    """Return whether ``payload`` targets the configured ``branch``.

    A payload without a ``ref`` always matches.
    """
    if payload.ref is msgspec.UNSET:
        return True
    return payload.ref == f"refs/heads/{branch}"
