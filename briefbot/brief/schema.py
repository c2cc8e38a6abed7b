"""Creative brief form schema and modal rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from briefbot.models import DEFAULT_BUDGET, DEFAULT_NOTES, FormSubmission

MODAL_CALLBACK_ID = "brief_submission"
SHARE_ACTION_ID = "share_brief"


class FormValidationError(Exception):
    """Raised when a required field is missing from a submission."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing


@dataclass(frozen=True)
class FormField:
    """One input block in the brief modal."""

    block_id: str
    action_id: str
    label: str
    placeholder: str
    multiline: bool = False
    required: bool = True


BRIEF_FIELDS: tuple[FormField, ...] = (
    FormField("project_name", "project_name_input", "Project Name", "Enter project name"),
    FormField("client", "client_input", "Client", "Enter client name"),
    FormField(
        "audience", "audience_input", "Target Audience",
        "Describe the target audience", multiline=True,
    ),
    FormField(
        "objectives", "objectives_input", "Objectives",
        "What are the key objectives?", multiline=True,
    ),
    FormField(
        "deliverables", "deliverables_input", "Deliverables",
        "List the deliverables needed", multiline=True,
    ),
    FormField("timeline", "timeline_input", "Timeline", "Enter timeline/deadline"),
    FormField("budget", "budget_input", "Budget", "Enter budget range", required=False),
    FormField(
        "additional_notes", "notes_input", "Additional Notes",
        "Any additional notes or requirements", multiline=True, required=False,
    ),
)

# block_id -> FormSubmission attribute
_SUBMISSION_ATTRS = {
    "project_name": "project_name",
    "client": "client",
    "audience": "audience",
    "objectives": "objectives",
    "deliverables": "deliverables",
    "timeline": "timeline",
    "budget": "budget",
    "additional_notes": "notes",
}

_DEFAULTS = {"budget": DEFAULT_BUDGET, "notes": DEFAULT_NOTES}


def _plain_text(text: str) -> dict[str, str]:
    return {"type": "plain_text", "text": text}


def build_input_block(field: FormField) -> dict[str, Any]:
    element: dict[str, Any] = {
        "type": "plain_text_input",
        "action_id": field.action_id,
        "placeholder": _plain_text(field.placeholder),
    }
    if field.multiline:
        element["multiline"] = True
    block: dict[str, Any] = {
        "type": "input",
        "block_id": field.block_id,
        "element": element,
        "label": _plain_text(field.label),
    }
    if not field.required:
        block["optional"] = True
    return block


def build_brief_modal(fields: tuple[FormField, ...] = BRIEF_FIELDS) -> dict[str, Any]:
    """Render the Creative Brief Builder modal view."""
    return {
        "type": "modal",
        "callback_id": MODAL_CALLBACK_ID,
        "title": _plain_text("Creative Brief Builder"),
        "submit": _plain_text("Create Brief"),
        "close": _plain_text("Cancel"),
        "blocks": [build_input_block(f) for f in fields],
    }


def extract_submission(
    values: dict[str, Any],
    submitter_id: str,
    origin_channel: str | None = None,
    fields: tuple[FormField, ...] = BRIEF_FIELDS,
) -> FormSubmission:
    """Build a FormSubmission from ``view.state.values``.

    Whitespace-only or non-string input counts as empty. Empty optional
    fields fall back to their defaults; empty required fields raise
    FormValidationError naming every missing block.
    """
    data: dict[str, Any] = {}
    missing: list[str] = []
    for field in fields:
        raw = _element_value(values.get(field.block_id), field.action_id)
        attr = _SUBMISSION_ATTRS[field.block_id]
        if raw.strip():
            data[attr] = raw
        elif field.required:
            missing.append(field.block_id)
        else:
            data[attr] = _DEFAULTS[attr]

    if missing:
        raise FormValidationError(missing)

    return FormSubmission(submitter_id=submitter_id, origin_channel=origin_channel, **data)


def _element_value(block: Any, action_id: str) -> str:
    element = block.get(action_id) if isinstance(block, dict) else None
    value = element.get("value") if isinstance(element, dict) else None
    return value if isinstance(value, str) else ""


def validation_errors(error: FormValidationError) -> dict[str, str]:
    """Map a FormValidationError to Slack's ``response_action: errors`` shape."""
    labels = {f.block_id: f.label for f in BRIEF_FIELDS}
    return {
        block_id: f"{labels.get(block_id, block_id)} is required"
        for block_id in error.missing
    }
