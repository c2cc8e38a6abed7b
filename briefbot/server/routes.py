"""Slack webhook endpoints.

Provides endpoints for:
- The /briefbuilder slash command (opens the brief modal)
- Interactivity payloads (modal submission, "Share in Channel" clicks)

Every POST is signature-verified against the raw body before anything is
parsed. Work that calls Slack after the response is sent runs as a
background task and only logs its failures.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from briefbot.brief.formatter import build_brief_blocks, build_share_blocks, format_brief
from briefbot.brief.schema import (
    MODAL_CALLBACK_ID,
    SHARE_ACTION_ID,
    FormValidationError,
    build_brief_modal,
    extract_submission,
    validation_errors,
)
from briefbot.brief.share_token import MAX_VALUE_LENGTH, ShareTokenError
from briefbot.models import AuditEvent, AuditEventType, RiskLevel
from briefbot.slack.client import DownstreamError
from briefbot.webhook.signature import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    AuthenticationError,
    ReplayedRequestError,
)

if TYPE_CHECKING:
    from briefbot.audit.logger import AuditLogger
    from briefbot.brief.registry import ChannelRegistry
    from briefbot.brief.share_token import ShareTokenSigner
    from briefbot.slack.client import SlackClient
    from briefbot.webhook.replay_protection import ReplayGuard
    from briefbot.webhook.signature import SignatureVerifier

logger = logging.getLogger(__name__)

RETRY_HEADER = "x-slack-retry-num"
JSON_CONTENT_TYPE = "application/json"


def parse_form(body: bytes) -> dict[str, str]:
    """Decode an ``application/x-www-form-urlencoded`` body."""
    return dict(urllib.parse.parse_qsl(
        body.decode("utf-8", errors="replace"), keep_blank_values=True,
    ))


def is_json(content_type: str) -> bool:
    return content_type.split(";")[0].strip().lower() == JSON_CONTENT_TYPE


def parse_body(body: bytes, content_type: str) -> dict[str, Any]:
    """Decode a form-encoded or JSON request body into a field mapping.

    Bodies that do not decode to an object yield an empty mapping.
    """
    if not is_json(content_type):
        return parse_form(body)
    try:
        fields = json.loads(body.decode("utf-8", errors="replace"))
    except json.JSONDecodeError:
        return {}
    return fields if isinstance(fields, dict) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def create_slack_router(
    verifier: SignatureVerifier,
    replay_guard: ReplayGuard,
    slack: SlackClient,
    registry: ChannelRegistry,
    signer: ShareTokenSigner,
    audit_logger: AuditLogger | None = None,
) -> APIRouter:
    """Create the Slack webhook router."""
    router = APIRouter()

    def audit(
        event_type: AuditEventType,
        action: str,
        result: str,
        risk_level: RiskLevel = RiskLevel.INFO,
        **kwargs: Any,
    ) -> None:
        if audit_logger:
            audit_logger.log(AuditEvent(
                event_type=event_type,
                action=action,
                result=result,
                risk_level=risk_level,
                **kwargs,
            ))

    async def authenticate(request: Request) -> bytes:
        """Return the raw body of a genuine, first-seen Slack request."""
        body = await request.body()
        headers = {k.lower(): v for k, v in request.headers.items()}
        verifier.verify_headers(headers, body)
        # Slack re-delivers with a fresh signature; the caller acks those.
        if RETRY_HEADER not in headers and not replay_guard.check(
            headers[SIGNATURE_HEADER], int(headers[TIMESTAMP_HEADER]),
        ):
            raise ReplayedRequestError("Request already processed")
        return body

    def reject(request: Request, exc: AuthenticationError) -> JSONResponse:
        logger.warning("Rejected %s: %s", request.url.path, exc.reason)
        event_type = (
            AuditEventType.REQUEST_REPLAYED
            if isinstance(exc, ReplayedRequestError)
            else AuditEventType.AUTH_FAILURE
        )
        audit(
            event_type,
            action=f"{request.method} {request.url.path}",
            result="rejected",
            risk_level=RiskLevel.HIGH,
            details={"reason": exc.reason},
        )
        return JSONResponse({"error": str(exc)}, status_code=400)

    @router.post("/briefbuilder")
    @router.post("/slack/commands")
    async def slash_command(request: Request) -> Response:
        """Open the brief modal for ``/briefbuilder``."""
        try:
            body = await authenticate(request)
        except AuthenticationError as exc:
            return reject(request, exc)
        if RETRY_HEADER in request.headers:
            return Response(status_code=200)

        form = parse_body(body, request.headers.get("content-type", ""))
        trigger_id = _text(form.get("trigger_id"))
        user_id = _text(form.get("user_id"))
        channel_id = _text(form.get("channel_id"))
        if not trigger_id:
            return JSONResponse({"error": "Missing trigger_id"}, status_code=400)

        if user_id and channel_id:
            registry.remember(user_id, channel_id)

        try:
            await slack.open_form(trigger_id, build_brief_modal())
        except DownstreamError as exc:
            logger.exception("Error opening brief form")
            audit(
                AuditEventType.DOWNSTREAM_ERROR,
                action=exc.method,
                result="failure",
                risk_level=RiskLevel.MEDIUM,
                user_id=user_id or None,
                channel_id=channel_id or None,
                details={"error": exc.error},
            )
            return PlainTextResponse("Error opening form", status_code=500)

        audit(
            AuditEventType.FORM_OPENED,
            action="views.open",
            result="success",
            user_id=user_id or None,
            channel_id=channel_id or None,
        )
        return Response(status_code=200)

    @router.post("/slack/interactive")
    async def interactive(request: Request, background_tasks: BackgroundTasks) -> Response:
        """Handle modal submissions and button clicks."""
        try:
            body = await authenticate(request)
        except AuthenticationError as exc:
            return reject(request, exc)
        if RETRY_HEADER in request.headers:
            return Response(status_code=200)

        content_type = request.headers.get("content-type", "")
        fields = parse_body(body, content_type)
        payload: Any = fields.get("payload")
        if payload is None and is_json(content_type):
            # A JSON body may carry the interaction object itself.
            payload = fields
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError:
                payload = None
        if not isinstance(payload, dict):
            logger.info("Ignoring interactive request without a JSON payload")
            return Response(status_code=200)

        user_id = _text(_mapping(payload.get("user")).get("id"))
        payload_type = payload.get("type")

        if payload_type == "block_actions":
            actions = payload.get("actions")
            action = _mapping(actions[0]) if isinstance(actions, list) and actions else {}
            if action.get("action_id") == SHARE_ACTION_ID:
                background_tasks.add_task(share_brief, _text(action.get("value")), user_id)
            return Response(status_code=200)

        view = _mapping(payload.get("view"))
        if payload_type == "view_submission" and view.get("callback_id") == MODAL_CALLBACK_ID:
            values = _mapping(_mapping(view.get("state")).get("values"))
            origin_channel = registry.lookup(user_id)
            try:
                submission = extract_submission(values, user_id, origin_channel)
            except FormValidationError as exc:
                logger.info("Brief from %s missing %s", user_id, exc.missing)
                return JSONResponse({
                    "response_action": "errors",
                    "errors": validation_errors(exc),
                })

            brief = format_brief(submission)
            share_value: str | None = signer.issue(brief, origin_channel or user_id)
            if len(share_value) > MAX_VALUE_LENGTH:
                logger.warning("Brief from %s too long to share; sending without button", user_id)
                share_value = None
            background_tasks.add_task(send_brief, user_id, brief, share_value)
            audit(
                AuditEventType.BRIEF_SUBMITTED,
                action="view_submission",
                result="success",
                user_id=user_id,
                channel_id=origin_channel,
                details={"project_name": submission.project_name},
            )
            return JSONResponse({"response_action": "clear"})

        logger.debug("Ignoring interactive payload type %r", payload_type)
        return Response(status_code=200)

    async def send_brief(user_id: str, brief: str, share_value: str | None) -> None:
        """DM the formatted brief to its author."""
        try:
            await slack.publish_message(
                user_id,
                "Your creative brief is ready!",
                build_brief_blocks(brief, share_value),
            )
        except DownstreamError as exc:
            logger.exception("Error posting brief to %s", user_id)
            audit(
                AuditEventType.DOWNSTREAM_ERROR,
                action=exc.method,
                result="failure",
                risk_level=RiskLevel.MEDIUM,
                user_id=user_id,
                details={"error": exc.error},
            )

    async def share_brief(token: str, user_id: str) -> None:
        """Re-post a brief to the channel bound into its share token."""
        try:
            share = signer.verify(token)
        except ShareTokenError as exc:
            logger.warning("Rejected share from %s: %s", user_id, exc.reason)
            audit(
                AuditEventType.SHARE_REJECTED,
                action="share_brief",
                result="rejected",
                risk_level=RiskLevel.HIGH,
                user_id=user_id or None,
                details={"reason": exc.reason},
            )
            return

        try:
            await slack.publish_message(
                share.channel, "New Creative Brief", build_share_blocks(share.brief),
            )
        except DownstreamError as exc:
            logger.exception("Error sharing brief to %s", share.channel)
            audit(
                AuditEventType.DOWNSTREAM_ERROR,
                action=exc.method,
                result="failure",
                risk_level=RiskLevel.MEDIUM,
                user_id=user_id or None,
                channel_id=share.channel,
                details={"error": exc.error},
            )
            return

        audit(
            AuditEventType.BRIEF_SHARED,
            action="share_brief",
            result="success",
            user_id=user_id or None,
            channel_id=share.channel,
        )

    return router
