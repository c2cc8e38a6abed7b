"""Slack request signature verification.

Slack signs every webhook with HMAC-SHA256 over ``v0:{timestamp}:{body}``
using the app's signing secret. The body must be the exact bytes received;
re-serializing a parsed body can change its byte layout.
"""

from __future__ import annotations

import hashlib
import hmac
import time

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"
SIGNATURE_VERSION = "v0"
DEFAULT_SKEW_SECONDS = 300


class AuthenticationError(Exception):
    """Raised when an inbound request cannot be attributed to Slack."""

    reason = "unauthenticated"


class MalformedHeadersError(AuthenticationError):
    reason = "malformed_headers"


class StaleTimestampError(AuthenticationError):
    reason = "stale"


class SignatureMismatchError(AuthenticationError):
    reason = "signature_mismatch"


class ReplayedRequestError(AuthenticationError):
    reason = "replayed"


def compute_signature(secret: str, timestamp: str, body: bytes) -> str:
    """Return the ``v0=<hex>`` signature Slack would send for ``body``."""
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
    digest = hmac.new(secret.encode(), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


class SignatureVerifier:
    """Verifies Slack signing-secret signatures within a freshness window."""

    def __init__(
        self,
        signing_secret: str,
        allowed_skew_seconds: int = DEFAULT_SKEW_SECONDS,
    ) -> None:
        self._secret = signing_secret
        self._allowed_skew_seconds = allowed_skew_seconds

    @property
    def allowed_skew_seconds(self) -> int:
        return self._allowed_skew_seconds

    def verify(
        self,
        body: bytes,
        signature: str | None,
        timestamp: str | None,
        now: float | None = None,
    ) -> None:
        """Raise an AuthenticationError subclass unless the request is genuine.

        The freshness check runs first, so a stale request is rejected even
        when its signature is correct.
        """
        if not signature or not timestamp:
            raise MalformedHeadersError("Missing signature headers")

        try:
            request_ts = int(timestamp)
        except ValueError:
            raise MalformedHeadersError("Request timestamp is not an integer") from None

        current = time.time() if now is None else now
        if abs(int(current) - request_ts) > self._allowed_skew_seconds:
            raise StaleTimestampError("Request timestamp outside allowed window")

        expected = compute_signature(self._secret, timestamp, body)
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            raise SignatureMismatchError("Invalid signature")

    def verify_headers(
        self,
        headers: dict[str, str],
        body: bytes,
        now: float | None = None,
    ) -> None:
        """Verify using lower-cased request headers."""
        self.verify(
            body,
            headers.get(SIGNATURE_HEADER),
            headers.get(TIMESTAMP_HEADER),
            now=now,
        )
