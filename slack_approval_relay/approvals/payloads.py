"""Schemas for Slack interaction payloads and their conversion to domain values."""

from __future__ import annotations

import json
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .messages import APPROVE_ACTION_ID, REJECT_ACTION_ID
from .modal import (
    APPROVER_ACTION_ID,
    APPROVER_BLOCK_ID,
    MESSAGE_ACTION_ID,
    MESSAGE_BLOCK_ID,
)
from .models import APPROVED, REJECTED, ApprovalRequest, Decision

VIEW_SUBMISSION = "view_submission"
BLOCK_ACTIONS = "block_actions"
SUPPORTED_TYPES = (VIEW_SUBMISSION, BLOCK_ACTIONS)

_OUTCOME_BY_ACTION = {
    APPROVE_ACTION_ID: APPROVED,
    REJECT_ACTION_ID: REJECTED,
}


class InvalidPayloadError(ValueError):
    """Raised when Slack sends an interaction payload we cannot trust."""


class UnsupportedInteractionError(Exception):
    """Raised for well-formed interaction types this app does not handle."""

    def __init__(self, payload_type: str) -> None:
        super().__init__(f"Unsupported interaction type '{payload_type}'")
        self.payload_type = payload_type


class IncompleteSubmissionError(ValueError):
    """A modal submission is missing a required input.

    ``block_id`` names the input block so the modal can flag it inline.
    """

    def __init__(self, block_id: str, message: str) -> None:
        super().__init__(f"{block_id}: {message}")
        self.block_id = block_id
        self.message = message


class SlackUser(BaseModel):
    id: str = Field(..., min_length=1)


class SelectedOption(BaseModel):
    value: str


class StateValue(BaseModel):
    """One input element's state inside ``view.state.values``."""

    type: str | None = None
    value: str | None = None
    selected_option: SelectedOption | None = None


class ViewState(BaseModel):
    values: Dict[str, Dict[str, StateValue]] = Field(default_factory=dict)


class SubmittedView(BaseModel):
    callback_id: str = ""
    state: ViewState = Field(default_factory=ViewState)


class ViewSubmissionPayload(BaseModel):
    type: Literal["view_submission"]
    user: SlackUser
    view: SubmittedView


class ButtonAction(BaseModel):
    action_id: str
    value: str | None = None


class BlockActionsPayload(BaseModel):
    type: Literal["block_actions"]
    user: SlackUser
    actions: List[ButtonAction] = Field(..., min_length=1)


InteractionPayload = Annotated[
    Union[ViewSubmissionPayload, BlockActionsPayload],
    Field(discriminator="type"),
]

_interaction_adapter: TypeAdapter[InteractionPayload] = TypeAdapter(InteractionPayload)


def parse_interaction_payload(raw: str | None) -> ViewSubmissionPayload | BlockActionsPayload:
    """Decode the ``payload`` form field and validate it against its variant."""

    if not raw:
        raise InvalidPayloadError("Interaction payload is missing.")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidPayloadError("Interaction payload is not valid JSON.") from exc

    if not isinstance(data, dict):
        raise InvalidPayloadError("Interaction payload must be a JSON object.")

    payload_type = data.get("type")
    if not isinstance(payload_type, str) or not payload_type:
        raise InvalidPayloadError("Interaction payload has no type.")
    if payload_type not in SUPPORTED_TYPES:
        raise UnsupportedInteractionError(payload_type)

    try:
        return _interaction_adapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Invalid {payload_type} payload.") from exc


def _state_value(payload: ViewSubmissionPayload, block_id: str, action_id: str) -> StateValue | None:
    return payload.view.state.values.get(block_id, {}).get(action_id)


def extract_approval_request(payload: ViewSubmissionPayload) -> ApprovalRequest:
    """Build the approval request from a submitted modal.

    The acting user is the requester. The message text is kept verbatim.
    """

    approver_state = _state_value(payload, APPROVER_BLOCK_ID, APPROVER_ACTION_ID)
    if approver_state is None or approver_state.selected_option is None or not approver_state.selected_option.value:
        raise IncompleteSubmissionError(APPROVER_BLOCK_ID, "Please select an approver.")

    message_state = _state_value(payload, MESSAGE_BLOCK_ID, MESSAGE_ACTION_ID)
    if message_state is None or message_state.value is None or not message_state.value.strip():
        raise IncompleteSubmissionError(MESSAGE_BLOCK_ID, "Please enter a message.")

    return ApprovalRequest(
        requester_id=payload.user.id,
        approver_id=approver_state.selected_option.value,
        message=message_state.value,
    )


def extract_decision(payload: BlockActionsPayload) -> Decision:
    """Build the decision from a button click on an approval request."""

    action = payload.actions[0]
    outcome = _OUTCOME_BY_ACTION.get(action.action_id)
    if outcome is None:
        raise InvalidPayloadError(f"Unknown action '{action.action_id}'.")
    if not action.value:
        raise InvalidPayloadError("Button value does not carry a requester id.")

    return Decision(requester_id=action.value, approver_id=payload.user.id, outcome=outcome)
