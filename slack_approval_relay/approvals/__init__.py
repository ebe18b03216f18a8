"""Approval workflow: directory lookup, modal, messages and webhook handlers."""

from .directory import ApproverOption, fetch_approver_options
from .handlers import (
    InteractionResponse,
    handle_block_actions,
    handle_interaction,
    handle_view_submission,
    open_approval_form,
)
from .messages import (
    APPROVE_ACTION_ID,
    REJECT_ACTION_ID,
    build_approval_request_message,
    build_decision_message,
)
from .modal import APPROVAL_MODAL_CALLBACK_ID, build_approval_modal
from .models import APPROVED, REJECTED, ApprovalRequest, Decision
from .payloads import InvalidPayloadError, parse_interaction_payload

__all__ = [
    "ApproverOption",
    "fetch_approver_options",
    "InteractionResponse",
    "handle_block_actions",
    "handle_interaction",
    "handle_view_submission",
    "open_approval_form",
    "APPROVE_ACTION_ID",
    "REJECT_ACTION_ID",
    "build_approval_request_message",
    "build_decision_message",
    "APPROVAL_MODAL_CALLBACK_ID",
    "build_approval_modal",
    "APPROVED",
    "REJECTED",
    "ApprovalRequest",
    "Decision",
    "InvalidPayloadError",
    "parse_interaction_payload",
]
