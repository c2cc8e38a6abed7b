"""FastAPI application for the brief builder bot."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from briefbot.audit.logger import AuditLogger
from briefbot.brief.registry import ChannelRegistry
from briefbot.brief.share_token import ShareTokenSigner
from briefbot.config import Settings
from briefbot.server.routes import create_slack_router
from briefbot.slack.client import SlackClient
from briefbot.webhook.replay_protection import ReplayGuard
from briefbot.webhook.signature import SignatureVerifier

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    return create_app(settings, audit_logger=AuditLogger.from_settings(settings))


def create_app(
    settings: Settings,
    slack_client: SlackClient | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the bot app with signature verification on every Slack route."""
    app = FastAPI(docs_url=None, redoc_url=None)

    verifier = SignatureVerifier(settings.signing_secret)
    slack = slack_client or SlackClient(settings.bot_token, settings.slack_api_url)
    if not settings.bot_token and slack_client is None:
        logger.warning("SLACK_BOT_TOKEN is not set; Slack API calls will fail")

    app.state.registry = ChannelRegistry(ttl_seconds=settings.channel_ttl_seconds)
    app.state.replay_guard = ReplayGuard(window_seconds=verifier.allowed_skew_seconds)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(create_slack_router(
        verifier=verifier,
        replay_guard=app.state.replay_guard,
        slack=slack,
        registry=app.state.registry,
        signer=ShareTokenSigner(settings.share_secret, settings.share_ttl_seconds),
        audit_logger=audit_logger,
    ))

    return app
