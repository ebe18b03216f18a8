"""Builder for the approval request modal."""

from __future__ import annotations

from typing import Dict, List, Sequence

from .directory import ApproverOption

APPROVAL_MODAL_CALLBACK_ID = "approval_modal"
APPROVER_BLOCK_ID = "approver_section"
APPROVER_ACTION_ID = "approver_select"
MESSAGE_BLOCK_ID = "text_section"
MESSAGE_ACTION_ID = "approval_message"

MAX_OPTION_TEXT_LENGTH = 75
MAX_SELECT_OPTIONS = 100


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _plain_text(text: str) -> Dict[str, str]:
    return {"type": "plain_text", "text": text}


def _option(candidate: ApproverOption) -> Dict:
    return {
        "text": _plain_text(_truncate(candidate.label, MAX_OPTION_TEXT_LENGTH)),
        "value": candidate.user_id,
    }


def build_approval_modal(candidates: Sequence[ApproverOption]) -> Dict:
    """Build the modal holding the approver dropdown and the message field.

    Slack rejects ``static_select`` elements with more than
    ``MAX_SELECT_OPTIONS`` options, so only the first ones are rendered.
    """

    options: List[Dict] = [_option(candidate) for candidate in candidates[:MAX_SELECT_OPTIONS]]

    return {
        "type": "modal",
        "callback_id": APPROVAL_MODAL_CALLBACK_ID,
        "title": _plain_text("Approval Request"),
        "submit": _plain_text("Submit"),
        "close": _plain_text("Cancel"),
        "blocks": [
            {
                "type": "input",
                "block_id": APPROVER_BLOCK_ID,
                "label": _plain_text("Select an approver"),
                "optional": False,
                "element": {
                    "type": "static_select",
                    "action_id": APPROVER_ACTION_ID,
                    "placeholder": _plain_text("Choose someone"),
                    "options": options,
                },
            },
            {
                "type": "input",
                "block_id": MESSAGE_BLOCK_ID,
                "label": _plain_text("Approval Message"),
                "optional": False,
                "element": {
                    "type": "plain_text_input",
                    "action_id": MESSAGE_ACTION_ID,
                    "multiline": True,
                },
            },
        ],
    }
