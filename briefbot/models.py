"""Shared Pydantic data models for briefbot."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BUDGET = "Not specified"
DEFAULT_NOTES = "None"

# --- Enums ---


class AuditEventType(str, Enum):
    AUTH_FAILURE = "auth_failure"
    REQUEST_REPLAYED = "request_replayed"
    FORM_OPENED = "form_opened"
    BRIEF_SUBMITTED = "brief_submitted"
    BRIEF_SHARED = "brief_shared"
    SHARE_REJECTED = "share_rejected"
    DOWNSTREAM_ERROR = "downstream_error"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Brief Models ---


class FormSubmission(BaseModel):
    """Values submitted through the brief modal."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    client: str
    audience: str
    objectives: str
    deliverables: str
    timeline: str
    budget: str = DEFAULT_BUDGET
    notes: str = DEFAULT_NOTES
    submitter_id: str
    origin_channel: str | None = None


class SharePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    brief: str
    channel: str
    expires_at: int  # unix seconds


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    user_id: str | None = None
    channel_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
