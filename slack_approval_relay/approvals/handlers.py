"""Handlers for the three webhook stages of an approval.

``open_approval_form`` serves the slash command, ``handle_view_submission``
relays a submitted modal to the approver and ``handle_block_actions`` reports
the approver's decision back to the requester. The stages share no state: the
requester id travels inside the approver's buttons.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from slack_sdk.errors import SlackApiError, SlackClientError
import structlog

from slack_approval_relay.slack_client import SlackClient

from .directory import fetch_approver_options
from .messages import build_approval_request_message, build_decision_message
from .modal import APPROVAL_MODAL_CALLBACK_ID, MAX_SELECT_OPTIONS, build_approval_modal
from .payloads import (
    BlockActionsPayload,
    IncompleteSubmissionError,
    InvalidPayloadError,
    UnsupportedInteractionError,
    ViewSubmissionPayload,
    extract_approval_request,
    extract_decision,
    parse_interaction_payload,
)

SUBMISSION_FAILED_TEXT = "Failed to send message"
DECISION_FAILED_TEXT = "Failed to send result"
INVALID_PAYLOAD_TEXT = "Invalid interaction payload"


@dataclass(frozen=True)
class InteractionResponse:
    """HTTP answer for an interaction webhook; ``body`` is text or a JSON object."""

    status: int = 200
    body: str | Dict[str, Any] = field(default="")


# URLError and socket errors surface as OSError when a request never reaches Slack.
DELIVERY_ERRORS = (SlackClientError, OSError)


def _slack_error_code(exc: Exception) -> str:
    if isinstance(exc, SlackApiError) and getattr(exc, "response", None) is not None:
        return exc.response.get("error") or str(exc)
    return str(exc)


def open_approval_form(slack_client: SlackClient, trigger_id: str, *, requester_id: str | None = None) -> None:
    """Look up approvers and open the request modal.

    Runs after the slash command has been acknowledged, so failures are only
    logged; the user simply does not see a modal.
    """

    log = structlog.get_logger().bind(requester_id=requester_id)
    try:
        candidates = fetch_approver_options(slack_client)
        if len(candidates) > MAX_SELECT_OPTIONS:
            log.warning("approver_options_truncated", total=len(candidates), shown=MAX_SELECT_OPTIONS)
        view = build_approval_modal(candidates)
        slack_client.open_view(trigger_id=trigger_id, view=view)
    except DELIVERY_ERRORS as exc:
        log.error("approval_modal_failed", error=_slack_error_code(exc))
        return
    except Exception:
        log.exception("approval_modal_failed")
        return

    log.info("approval_modal_opened", option_count=min(len(candidates), MAX_SELECT_OPTIONS))


def handle_view_submission(slack_client: SlackClient, payload: ViewSubmissionPayload) -> InteractionResponse:
    """Send the approval request to the chosen approver.

    An empty 200 closes the modal; a missing input keeps it open with an
    inline error instead of sending a half-filled request.
    """

    log = structlog.get_logger().bind(requester_id=payload.user.id)

    if payload.view.callback_id != APPROVAL_MODAL_CALLBACK_ID:
        log.info("view_submission_ignored", callback_id=payload.view.callback_id)
        return InteractionResponse()

    try:
        request = extract_approval_request(payload)
    except IncompleteSubmissionError as exc:
        log.warning("incomplete_submission", block_id=exc.block_id)
        return InteractionResponse(
            body={"response_action": "errors", "errors": {exc.block_id: exc.message}},
        )

    log = log.bind(approver_id=request.approver_id)
    message = build_approval_request_message(request)
    try:
        slack_client.post_message(
            channel=message["channel"],
            text=message["text"],
            blocks=message["blocks"],
        )
    except DELIVERY_ERRORS as exc:
        log.error("approval_request_failed", error=_slack_error_code(exc))
        return InteractionResponse(status=500, body=SUBMISSION_FAILED_TEXT)

    log.info("approval_request_sent")
    return InteractionResponse()


def handle_block_actions(slack_client: SlackClient, payload: BlockActionsPayload) -> InteractionResponse:
    """Tell the requester what the approver decided.

    Each click sends one message; repeated clicks are not deduplicated.
    """

    log = structlog.get_logger().bind(approver_id=payload.user.id)
    try:
        decision = extract_decision(payload)
    except InvalidPayloadError as exc:
        log.warning("invalid_interaction_payload", reason=str(exc))
        return InteractionResponse(status=400, body=INVALID_PAYLOAD_TEXT)

    log = log.bind(requester_id=decision.requester_id, outcome=decision.outcome)
    message = build_decision_message(decision)
    try:
        slack_client.post_message(channel=message["channel"], text=message["text"])
    except DELIVERY_ERRORS as exc:
        log.error("decision_failed", error=_slack_error_code(exc))
        return InteractionResponse(status=500, body=DECISION_FAILED_TEXT)

    log.info("decision_sent")
    return InteractionResponse()


def handle_interaction(slack_client: SlackClient, raw_payload: str | None) -> InteractionResponse:
    """Parse an interaction webhook and route it by its ``type``."""

    log = structlog.get_logger()
    try:
        payload = parse_interaction_payload(raw_payload)
    except UnsupportedInteractionError as exc:
        log.info("interaction_ignored", payload_type=exc.payload_type)
        return InteractionResponse()
    except InvalidPayloadError as exc:
        log.warning("invalid_interaction_payload", reason=str(exc))
        return InteractionResponse(status=400, body=INVALID_PAYLOAD_TEXT)

    if isinstance(payload, ViewSubmissionPayload):
        return handle_view_submission(slack_client, payload)
    return handle_block_actions(slack_client, payload)
