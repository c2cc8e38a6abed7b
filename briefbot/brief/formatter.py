"""Formats a FormSubmission into a creative brief and its Slack blocks."""

from __future__ import annotations

from datetime import date
from typing import Any

from briefbot.brief.schema import SHARE_ACTION_ID
from briefbot.models import DEFAULT_NOTES, FormSubmission

RULE = "━" * 40


def format_date(day: date) -> str:
    """Long US date, e.g. ``Monday, October 19, 2026``."""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def format_brief(submission: FormSubmission, today: date | None = None) -> str:
    """Render the brief text.

    Field values are inserted verbatim; the brief is shown inside a code
    block, so no escaping is applied. The notes section is only present
    when the submitter supplied notes.
    """
    day = today or date.today()
    lines = [
        "✨ **CREATIVE BRIEF** ✨",
        RULE,
        "",
        f"🎯 **{submission.project_name.upper()}**",
        "",
        f"👤 **Client:** {submission.client}",
        f"📝 **Created by:** <@{submission.submitter_id}>",
        f"📅 **Date:** {format_date(day)}",
        "",
        RULE,
        "",
        "🎭 **WHO ARE WE TALKING TO?**",
        submission.audience,
        "",
        "🚀 **WHAT ARE WE TRYING TO ACHIEVE?**",
        submission.objectives,
        "",
        "📦 **WHAT ARE WE CREATING?**",
        submission.deliverables,
        "",
        "⏰ **WHEN DO WE NEED IT?**",
        submission.timeline,
        "",
        "💰 **WHAT'S OUR BUDGET?**",
        submission.budget,
        "",
    ]
    if submission.notes != DEFAULT_NOTES:
        lines += [
            "📋 **ADDITIONAL NOTES & REQUIREMENTS**",
            submission.notes,
            "",
        ]
    lines += [
        RULE,
        "⚡ *Brief created with /briefbuilder - Let's make something amazing!* ⚡",
    ]
    return "\n".join(lines)


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _code_block(brief: str) -> str:
    return f"```{brief}```"


def build_brief_blocks(brief: str, share_value: str | None) -> list[dict[str, Any]]:
    """Blocks for the direct message sent to the submitter.

    ``share_value`` of None leaves out the "Share in Channel" button.
    """
    blocks: list[dict[str, Any]] = [
        _section(
            "✅ Your creative brief has been created! "
            "You can copy the text below and paste it into Jira:"
        ),
        _section(_code_block(brief)),
    ]
    if share_value is not None:
        blocks.append({
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Share in Channel"},
                    "action_id": SHARE_ACTION_ID,
                    "value": share_value,
                },
            ],
        })
    return blocks


def build_share_blocks(brief: str) -> list[dict[str, Any]]:
    """Blocks for the brief re-posted to the origin channel."""
    return [
        _section("📋 *New Creative Brief Created*"),
        _section(_code_block(brief)),
    ]
