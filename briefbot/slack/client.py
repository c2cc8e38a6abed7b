"""Outbound Slack Web API calls: views.open and chat.postMessage.

No call is retried. ``views.open`` consumes a single-use trigger id, so a
retry after a partial failure would fail anyway.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"
_TIMEOUT_SECONDS = 10.0


class DownstreamError(Exception):
    """Raised when a Slack Web API call fails."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class SlackClient:
    """Minimal async client for the two Slack methods briefbot uses."""

    def __init__(self, bot_token: str, api_url: str = SLACK_API_URL) -> None:
        self._bot_token = bot_token
        self._api_url = api_url.rstrip("/")

    async def open_form(self, trigger_id: str, view: dict[str, Any]) -> dict[str, Any]:
        """Open a modal using the trigger id from a slash command."""
        return await self._call("views.open", {"trigger_id": trigger_id, "view": view})

    async def publish_message(
        self,
        channel: str,
        text: str,
        blocks: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Post a message to a channel or, given a user id, as a DM."""
        payload: dict[str, Any] = {"channel": channel, "text": text}
        if blocks is not None:
            payload["blocks"] = blocks
        return await self._call("chat.postMessage", payload)

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._api_url}/{method}"
        headers = {
            "Authorization": f"Bearer {self._bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    url, json=payload, headers=headers, timeout=_TIMEOUT_SECONDS,
                )
        except httpx.HTTPError as exc:
            raise DownstreamError(method, type(exc).__name__) from exc

        if resp.status_code >= 400:
            raise DownstreamError(method, f"http_{resp.status_code}")

        try:
            data: dict[str, Any] = resp.json()
        except ValueError:
            raise DownstreamError(method, "invalid_json") from None

        if not data.get("ok"):
            raise DownstreamError(method, str(data.get("error", "unknown_error")))

        logger.debug("%s ok", method)
        return data
