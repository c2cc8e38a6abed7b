"""Process configuration read once from the environment at startup."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from briefbot.slack.client import SLACK_API_URL


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    signing_secret: str = Field(min_length=1)
    bot_token: str = ""
    port: int = 3000
    slack_api_url: str = SLACK_API_URL
    share_secret: str = Field(min_length=1)
    share_ttl_seconds: int = Field(default=86400, gt=0)
    channel_ttl_seconds: int = Field(default=3600, gt=0)
    audit_log_path: str | None = None
    audit_log_max_bytes: int = 10_485_760
    audit_log_backup_count: int = 5

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Fails fast when SLACK_SIGNING_SECRET is absent: without it no
        inbound request can be verified.
        """
        env = os.environ if environ is None else environ
        signing_secret = env.get("SLACK_SIGNING_SECRET", "")
        if not signing_secret:
            raise ConfigurationError("SLACK_SIGNING_SECRET is required")

        try:
            return cls(
                signing_secret=signing_secret,
                bot_token=env.get("SLACK_BOT_TOKEN", ""),
                port=int(env.get("PORT", "3000")),
                slack_api_url=env.get("SLACK_API_URL", SLACK_API_URL),
                share_secret=env.get("BRIEFBOT_SHARE_SECRET") or signing_secret,
                share_ttl_seconds=int(env.get("BRIEFBOT_SHARE_TTL_SECONDS", "86400")),
                channel_ttl_seconds=int(env.get("BRIEFBOT_CHANNEL_TTL_SECONDS", "3600")),
                audit_log_path=env.get("AUDIT_LOG_PATH") or None,
                audit_log_max_bytes=int(env.get("AUDIT_LOG_MAX_BYTES", "10485760")),
                audit_log_backup_count=int(env.get("AUDIT_LOG_BACKUP_COUNT", "5")),
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
