"""Replay protection for signed Slack requests.

A signature stays valid for the whole freshness window, so an attacker who
captures a request can resend it unchanged until the window closes. This
guard remembers accepted signatures until the verifier itself would reject
them, i.e. until ``request_timestamp + window_seconds``. Keying on the
request timestamp rather than arrival time also covers future-dated
requests, which the verifier accepts up to ``window_seconds`` early.

State is in-memory only; the freshness window bounds its size.
"""

from __future__ import annotations

import time


class ReplayGuard:
    """Remembers accepted request signatures while their timestamp is fresh."""

    def __init__(self, window_seconds: int = 300) -> None:
        self._window_seconds = window_seconds
        self._expires: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._expires)

    def check(self, signature: str, timestamp: int, now: float | None = None) -> bool:
        """Return True if ``signature`` is new, recording it as seen.

        Args:
            signature: The request's ``X-Slack-Signature`` value.
            timestamp: The request's verified ``X-Slack-Request-Timestamp``.
            now: Current Unix time (defaults to ``time.time()``).
        """
        # Whole seconds, matching the verifier's skew check.
        current = int(time.time() if now is None else now)
        self._prune(current)

        if signature in self._expires:
            return False

        self._expires[signature] = timestamp + self._window_seconds
        return True

    def _prune(self, now: int) -> None:
        expired = [sig for sig, expires_at in self._expires.items() if now > expires_at]
        for sig in expired:
            del self._expires[sig]
