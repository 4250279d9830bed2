"""HMAC-SHA256 signatures for outbound webhook payloads.

The wire contract:
    X-Webhook-Timestamp: <unix seconds>
    X-Webhook-Signature: sha256=<hex HMAC of "{timestamp}.{body}">

The secret string itself is the HMAC key (it is not hex-decoded).
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from collections.abc import Mapping

TIMESTAMP_HEADER = "X-Webhook-Timestamp"
SIGNATURE_HEADER = "X-Webhook-Signature"
SIGNATURE_PREFIX = "sha256="


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign(payload: str | bytes, secret: str | bytes) -> str:
    """Compute the hex HMAC-SHA256 of a payload.

    Args:
        payload: Raw bytes (or UTF-8 text) to sign.
        secret: Shared secret used as the HMAC key.

    Returns:
        Lowercase hex digest, without any prefix.
    """
    return hmac.new(_to_bytes(secret), _to_bytes(payload), hashlib.sha256).hexdigest()


def verify(payload: str | bytes, signature: str, secret: str | bytes) -> bool:
    """Check a hex signature against the payload in constant time.

    A candidate whose length differs from the expected digest is
    rejected up front; the digest length is public, so this leaks
    nothing about the secret. Never raises for a malformed candidate.

    Args:
        payload: Payload that was signed.
        signature: Candidate hex digest (no "sha256=" prefix).
        secret: Shared secret.

    Returns:
        True if the signature matches, False otherwise.
    """
    if not isinstance(signature, str):
        return False
    expected = sign(payload, secret).encode("ascii")
    candidate = signature.encode("utf-8")
    if len(candidate) != len(expected):
        return False
    return hmac.compare_digest(candidate, expected)


def new_secret() -> str:
    """Generate a secret for a new subscription: 32 random bytes, hex-encoded."""
    return secrets.token_hex(32)


def build_headers(
    payload: str | bytes,
    secret: str | bytes,
    timestamp: int | None = None,
) -> dict[str, str]:
    """Build the headers for one delivery.

    Args:
        payload: The exact body that will be transmitted.
        secret: Shared secret.
        timestamp: Unix seconds; defaults to now.

    Returns:
        Content-Type, timestamp and signature headers.
    """
    ts = str(int(time.time()) if timestamp is None else timestamp)
    signed = _to_bytes(ts) + b"." + _to_bytes(payload)
    return {
        "Content-Type": "application/json",
        TIMESTAMP_HEADER: ts,
        SIGNATURE_HEADER: f"{SIGNATURE_PREFIX}{sign(signed, secret)}",
    }


def verify_headers(
    payload: str | bytes,
    headers: Mapping[str, str],
    secret: str | bytes,
    tolerance_seconds: int | None = None,
    now: int | None = None,
) -> bool:
    """Verify a received webhook from its body and headers.

    Header lookup is case-insensitive. No freshness window is applied
    unless ``tolerance_seconds`` is given.

    Returns:
        True if both headers are present, well formed and match.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    ts = lowered.get(TIMESTAMP_HEADER.lower())
    header_sig = lowered.get(SIGNATURE_HEADER.lower())
    if not ts or not header_sig or not header_sig.startswith(SIGNATURE_PREFIX):
        return False

    try:
        ts_value = int(ts)
    except ValueError:
        return False

    if tolerance_seconds is not None:
        current = int(time.time()) if now is None else now
        if abs(current - ts_value) > tolerance_seconds:
            return False

    signed = _to_bytes(ts) + b"." + _to_bytes(payload)
    return verify(signed, header_sig[len(SIGNATURE_PREFIX) :], secret)


__all__ = [
    "SIGNATURE_HEADER",
    "SIGNATURE_PREFIX",
    "TIMESTAMP_HEADER",
    "build_headers",
    "new_secret",
    "sign",
    "verify",
    "verify_headers",
]
