"""Block Kit message builders for approval requests and decisions."""

from __future__ import annotations

from typing import Any, Dict, List

from .models import ApprovalRequest, Decision

APPROVE_ACTION_ID = "approve"
REJECT_ACTION_ID = "reject"
DECISION_BUTTONS_BLOCK_ID = "approval_buttons"


def _mention(user_id: str) -> str:
    return f"<@{user_id}>"


def _button(*, label: str, action_id: str, style: str, value: str) -> Dict[str, Any]:
    return {
        "type": "button",
        "text": {"type": "plain_text", "text": label},
        "style": style,
        "action_id": action_id,
        "value": value,
    }


def _decision_buttons(requester_id: str) -> Dict[str, Any]:
    # The requester id rides along verbatim; it is read back when a button is pressed.
    return {
        "type": "actions",
        "block_id": DECISION_BUTTONS_BLOCK_ID,
        "elements": [
            _button(label="Approve", action_id=APPROVE_ACTION_ID, style="primary", value=requester_id),
            _button(label="Reject", action_id=REJECT_ACTION_ID, style="danger", value=requester_id),
        ],
    }


def build_approval_request_message(request: ApprovalRequest) -> Dict[str, Any]:
    """Build the direct message sent to the approver."""

    blocks: List[Dict[str, Any]] = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*Message:*\n{request.message}",
            },
        },
        _decision_buttons(request.requester_id),
    ]

    return {
        "channel": request.approver_id,
        "text": f"You have an approval request from {_mention(request.requester_id)}",
        "blocks": blocks,
    }


def build_decision_message(decision: Decision) -> Dict[str, Any]:
    """Build the plain text outcome sent back to the requester."""

    if decision.approved:
        text = f"✅ Your request was approved by {_mention(decision.approver_id)}"
    else:
        text = f"❌ Your request was rejected by {_mention(decision.approver_id)}"

    return {"channel": decision.requester_id, "text": text}
