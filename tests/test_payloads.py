"""Tests for interaction payload parsing."""

import json
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slack_approval_relay.approvals.models import APPROVED, REJECTED  # noqa: E402
from slack_approval_relay.approvals.payloads import (  # noqa: E402
    BlockActionsPayload,
    IncompleteSubmissionError,
    InvalidPayloadError,
    UnsupportedInteractionError,
    ViewSubmissionPayload,
    extract_approval_request,
    extract_decision,
    parse_interaction_payload,
)


def _submission(values, user_id="U1"):
    return {
        "type": "view_submission",
        "user": {"id": user_id, "username": "alice"},
        "view": {"id": "V1", "callback_id": "approval_modal", "state": {"values": values}},
    }


def _complete_values(approver="U2", message="Please approve PR #4"):
    return {
        "approver_section": {
            "approver_select": {
                "type": "static_select",
                "selected_option": {"text": {"type": "plain_text", "text": "Bob"}, "value": approver},
            }
        },
        "text_section": {"approval_message": {"type": "plain_text_input", "value": message}},
    }


def _click(action_id, value="U1", user_id="U2"):
    return {
        "type": "block_actions",
        "user": {"id": user_id},
        "actions": [{"action_id": action_id, "block_id": "approval_buttons", "value": value, "type": "button"}],
    }


def test_parse_view_submission():
    payload = parse_interaction_payload(json.dumps(_submission(_complete_values())))

    assert isinstance(payload, ViewSubmissionPayload)
    assert payload.user.id == "U1"
    assert payload.view.callback_id == "approval_modal"


def test_parse_block_actions():
    payload = parse_interaction_payload(json.dumps(_click("approve")))

    assert isinstance(payload, BlockActionsPayload)
    assert payload.actions[0].value == "U1"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "not-json",
        '["array"]',
        "{}",
        '{"type": ""}',
        json.dumps({"type": "block_actions", "user": {"id": "U2"}, "actions": []}),
        json.dumps({"type": "block_actions", "actions": [{"action_id": "approve", "value": "U1"}]}),
        json.dumps({"type": "view_submission", "user": {"id": "U1"}}),
        json.dumps({"type": "view_submission", "user": {"id": ""}, "view": {}}),
    ],
)
def test_parse_rejects_malformed_payloads(raw):
    with pytest.raises(InvalidPayloadError):
        parse_interaction_payload(raw)


def test_parse_flags_unsupported_types():
    with pytest.raises(UnsupportedInteractionError) as err:
        parse_interaction_payload(json.dumps({"type": "view_closed", "user": {"id": "U1"}}))

    assert err.value.payload_type == "view_closed"


def test_extract_approval_request_keeps_message_verbatim():
    message = "  Ship it?\n*bold* & <stuff>  "
    payload = parse_interaction_payload(json.dumps(_submission(_complete_values(message=message))))

    request = extract_approval_request(payload)

    assert request.requester_id == "U1"
    assert request.approver_id == "U2"
    assert request.message == message


@pytest.mark.parametrize(
    ("values", "block_id"),
    [
        ({}, "approver_section"),
        (
            {
                "approver_section": {"approver_select": {"type": "static_select", "selected_option": None}},
                "text_section": {"approval_message": {"value": "hi"}},
            },
            "approver_section",
        ),
        (
            {
                "approver_section": {"approver_select": {"selected_option": {"value": "U2"}}},
            },
            "text_section",
        ),
        (
            {
                "approver_section": {"approver_select": {"selected_option": {"value": "U2"}}},
                "text_section": {"approval_message": {"value": "   "}},
            },
            "text_section",
        ),
    ],
)
def test_extract_approval_request_requires_both_inputs(values, block_id):
    payload = ViewSubmissionPayload.model_validate(_submission(values))

    with pytest.raises(IncompleteSubmissionError) as err:
        extract_approval_request(payload)

    assert err.value.block_id == block_id


@pytest.mark.parametrize(("action_id", "outcome"), [("approve", APPROVED), ("reject", REJECTED)])
def test_extract_decision_reads_requester_from_button_value(action_id, outcome):
    payload = BlockActionsPayload.model_validate(_click(action_id, value="U1", user_id="U2"))

    decision = extract_decision(payload)

    assert decision.requester_id == "U1"
    assert decision.approver_id == "U2"
    assert decision.outcome == outcome


def test_extract_decision_rejects_unknown_action():
    payload = BlockActionsPayload.model_validate(_click("approver_select"))

    with pytest.raises(InvalidPayloadError):
        extract_decision(payload)


@pytest.mark.parametrize("value", [None, ""])
def test_extract_decision_requires_requester_id(value):
    payload = BlockActionsPayload.model_validate(_click("approve", value=value))

    with pytest.raises(InvalidPayloadError):
        extract_decision(payload)
