"""Ephemeral values passed between the approval handlers.

None of these are stored: each one is built from a single webhook payload
and dropped once its notification has been sent.
"""

from __future__ import annotations

from dataclasses import dataclass

APPROVED = "approved"
REJECTED = "rejected"
OUTCOMES = (APPROVED, REJECTED)


@dataclass(frozen=True)
class ApprovalRequest:
    requester_id: str
    approver_id: str
    message: str


@dataclass(frozen=True)
class Decision:
    """An approver's answer; ``requester_id`` is read back from the button value."""

    requester_id: str
    approver_id: str
    outcome: str

    def __post_init__(self) -> None:
        if self.outcome not in OUTCOMES:
            raise ValueError(f"Unknown decision outcome '{self.outcome}'")

    @property
    def approved(self) -> bool:
        return self.outcome == APPROVED
