"""HMAC-SHA-256 verification for webhook payloads.

Source-control hosts sign the raw request body with the hook secret and
send the digest as ``X-Hub-Signature-256: sha256=<hex>``.  Verification
must use the exact bytes received; re-serialising parsed JSON is not
guaranteed to reproduce them.

Usage
-----
>>> body = b"{}"
>>> header = compute_signature(body, b"s")
>>> verify_signature(header, body, b"s")
True

"""

from __future__ import annotations

import hashlib
import hmac

__all__ = ["SIGNATURE_HEADER", "SIGNATURE_PREFIX", "compute_signature", "verify_signature"]

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(body: bytes, secret: bytes) -> str:
    """Return the ``sha256=<hex>`` signature for ``body`` keyed by ``secret``."""
    digest = hmac.new(secret, body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(header: str | None, body: bytes, secret: bytes) -> bool:
    """Check ``header`` against the expected signature of ``body``.

    Parameters
    ----------
    header
        Raw ``X-Hub-Signature-256`` header value, or ``None`` when absent.
    body
        Unparsed request body bytes.
    secret
        Shared secret for the addressed repository.

    Returns
    -------
    bool
        ``True`` only for an exact match.  Missing, untagged, or
        mismatched headers return ``False``; this function never raises
        on bad input.

    """
    if not header or not header.startswith(SIGNATURE_PREFIX):
        return False

    try:
        provided = header.encode("ascii")
    except UnicodeEncodeError:
        return False

    expected = compute_signature(body, secret).encode("ascii")
    return hmac.compare_digest(provided, expected)
