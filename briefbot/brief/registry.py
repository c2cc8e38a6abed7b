"""Remembers the channel each user last ran the slash command in."""

from __future__ import annotations

import time


class ChannelRegistry:
    """Maps submitter id to origin channel id with TTL eviction.

    Entries are written when ``/briefbuilder`` fires and read when the
    same user submits the modal. Expired entries are pruned on every write.
    """

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self._ttl_seconds = ttl_seconds
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def remember(self, user_id: str, channel_id: str, now: float | None = None) -> None:
        current = time.time() if now is None else now
        self._prune(current)
        self._entries[user_id] = (channel_id, current)

    def lookup(self, user_id: str, now: float | None = None) -> str | None:
        """Return the remembered channel, or None if absent or expired."""
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        channel_id, stored_at = entry
        current = time.time() if now is None else now
        if current - stored_at > self._ttl_seconds:
            return None
        return channel_id

    def _prune(self, now: float) -> None:
        cutoff = now - self._ttl_seconds
        stale = [uid for uid, (_, stored_at) in self._entries.items() if stored_at < cutoff]
        for uid in stale:
            del self._entries[uid]
