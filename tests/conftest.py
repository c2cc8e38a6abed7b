"""Shared test fixtures for briefbot."""

from __future__ import annotations

import json
import time
import urllib.parse
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from briefbot.audit.logger import AuditLogger
from briefbot.config import Settings
from briefbot.models import AuditEvent, AuditEventType, FormSubmission, RiskLevel
from briefbot.slack.client import SlackClient
from briefbot.webhook.signature import compute_signature

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        signing_secret=SIGNING_SECRET,
        bot_token="xoxb-test",
        share_secret="share-secret",
    )


@pytest.fixture
def mock_slack() -> AsyncMock:
    slack = AsyncMock(spec=SlackClient)
    slack.open_form.return_value = {"ok": True}
    slack.publish_message.return_value = {"ok": True}
    return slack


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def signed_headers(
    body: bytes,
    secret: str = SIGNING_SECRET,
    timestamp: int | None = None,
    content_type: str = "application/x-www-form-urlencoded",
) -> dict[str, str]:
    """Headers Slack would send with ``body``."""
    ts = str(timestamp if timestamp is not None else int(time.time()))
    return {
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": compute_signature(secret, ts, body),
        "Content-Type": content_type,
    }


def command_body(**kwargs: str) -> bytes:
    """Form-encoded /briefbuilder slash command body."""
    defaults = {
        "command": "/briefbuilder",
        "text": "",
        "trigger_id": "13345224609.738474920.8088930838d88f008e0",
        "user_id": "U2147483697",
        "channel_id": "C2147483705",
        "team_id": "T0001",
    }
    defaults.update(kwargs)
    return urllib.parse.urlencode(defaults).encode()


def interactive_body(payload: dict[str, Any]) -> bytes:
    """Form-encoded interactivity body wrapping ``payload``."""
    return urllib.parse.urlencode({"payload": json.dumps(payload)}).encode()


def json_body(fields: dict[str, Any]) -> bytes:
    """JSON request body carrying ``fields``."""
    return json.dumps(fields).encode()


def make_state_values(**overrides: str | None) -> dict[str, Any]:
    """``view.state.values`` for the brief modal with every required field set."""
    values: dict[str, str | None] = {
        "project_name": "Spring Launch",
        "client": "Acme Corp",
        "audience": "Urban commuters aged 25-40",
        "objectives": "Drive app installs",
        "deliverables": "3 social videos, 1 OOH poster",
        "timeline": "March 15",
        "budget": None,
        "additional_notes": None,
    }
    values.update(overrides)
    action_ids = {
        "project_name": "project_name_input",
        "client": "client_input",
        "audience": "audience_input",
        "objectives": "objectives_input",
        "deliverables": "deliverables_input",
        "timeline": "timeline_input",
        "budget": "budget_input",
        "additional_notes": "notes_input",
    }
    return {
        block_id: {action_ids[block_id]: {"type": "plain_text_input", "value": value}}
        for block_id, value in values.items()
    }


def make_view_submission(user_id: str = "U2147483697", **overrides: str | None) -> dict[str, Any]:
    return {
        "type": "view_submission",
        "user": {"id": user_id, "name": "jane"},
        "view": {
            "callback_id": "brief_submission",
            "state": {"values": make_state_values(**overrides)},
        },
    }


def make_share_click(value: str, user_id: str = "U2147483697") -> dict[str, Any]:
    return {
        "type": "block_actions",
        "user": {"id": user_id},
        "actions": [{"action_id": "share_brief", "type": "button", "value": value}],
    }


def make_submission(**kwargs: Any) -> FormSubmission:
    """Factory for FormSubmission with sensible defaults."""
    defaults: dict[str, Any] = {
        "project_name": "Spring Launch",
        "client": "Acme Corp",
        "audience": "Urban commuters aged 25-40",
        "objectives": "Drive app installs",
        "deliverables": "3 social videos, 1 OOH poster",
        "timeline": "March 15",
        "submitter_id": "U2147483697",
    }
    defaults.update(kwargs)
    return FormSubmission(**defaults)


def make_audit_event(**kwargs: Any) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "event_type": AuditEventType.AUTH_FAILURE,
        "action": "test_action",
        "result": "rejected",
        "risk_level": RiskLevel.HIGH,
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)
