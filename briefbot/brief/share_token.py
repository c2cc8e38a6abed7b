"""Signed state for the "Share in Channel" button.

The brief and its destination channel travel through Slack inside the
button's ``value`` and come back on click. The value is compact JSON with
an HMAC signature so a client cannot rewrite the destination or the brief
text:

    {"b": brief, "c": channel, "e": expires_unix, "s": base64url(hmac)}

The brief is kept raw (no ASCII escaping, no base64) because Slack caps
button values at ``MAX_VALUE_LENGTH`` characters.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from briefbot.models import SharePayload

MAX_VALUE_LENGTH = 2000


class ShareTokenError(Exception):
    """Raised when a share token is malformed, forged or expired."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ShareTokenSigner:
    """Issues and verifies share tokens.

    Provides:
    - HMAC-SHA256 signing with a process-side secret
    - Constant-time signature comparison
    - Expiry embedded in the signed payload
    """

    DEFAULT_TTL_SECONDS = 86400  # 24 hours

    def __init__(self, secret: str, ttl_seconds: int | None = None) -> None:
        """Initialize the signer.

        Args:
            secret: Secret key for HMAC signing.
            ttl_seconds: Token lifetime (default: 24 hours).
        """
        self._secret = secret.encode()
        self._ttl_seconds = ttl_seconds if ttl_seconds is not None else self.DEFAULT_TTL_SECONDS

    def issue(self, brief: str, channel: str, now: datetime | None = None) -> str:
        """Issue a token binding ``brief`` to ``channel``.

        Returns:
            The signed token string.
        """
        issued_at = now or datetime.now(UTC)
        fields: dict[str, Any] = {
            "b": brief,
            "c": channel,
            "e": int((issued_at + timedelta(seconds=self._ttl_seconds)).timestamp()),
        }
        fields["s"] = _b64encode(self._compute_signature(_canonical(fields)))
        return _canonical(fields)

    def verify(self, token: str, now: datetime | None = None) -> SharePayload:
        """Verify a token and return its payload.

        Raises:
            ShareTokenError: If the token is malformed, the signature does
                not match, or the token has expired.
        """
        try:
            fields = json.loads(token)
        except ValueError:
            raise ShareTokenError("malformed_token") from None
        if not isinstance(fields, dict) or not isinstance(fields.get("s"), str):
            raise ShareTokenError("malformed_token")

        signature_b64 = fields.pop("s")
        expected_b64 = _b64encode(self._compute_signature(_canonical(fields)))
        if not hmac.compare_digest(signature_b64.encode(), expected_b64.encode()):
            raise ShareTokenError("invalid_signature")

        try:
            payload = SharePayload(
                brief=fields.get("b"), channel=fields.get("c"), expires_at=fields.get("e"),
            )
        except ValidationError:
            raise ShareTokenError("invalid_payload") from None

        if (now or datetime.now(UTC)).timestamp() > payload.expires_at:
            raise ShareTokenError("token_expired")
        return payload

    def _compute_signature(self, data: str) -> bytes:
        return hmac.new(self._secret, data.encode(), hashlib.sha256).digest()


def _canonical(fields: dict[str, Any]) -> str:
    return json.dumps(fields, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")
