"""Directory lookup for eligible approvers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping

from slack_approval_relay.slack_client import SlackClient

SLACKBOT_USER_ID = "USLACKBOT"


@dataclass(frozen=True)
class ApproverOption:
    """A user that may be picked as approver in the request modal."""

    user_id: str
    label: str


def is_eligible_approver(member: Mapping[str, Any]) -> bool:
    """Return True for human accounts; bots and Slackbot are excluded."""

    if member.get("is_bot"):
        return False
    user_id = member.get("id")
    return bool(user_id) and user_id != SLACKBOT_USER_ID


def display_label(member: Mapping[str, Any]) -> str:
    # real_name may be absent or empty for freshly invited accounts
    return member.get("real_name") or member.get("name") or member["id"]


def to_approver_options(members: Iterable[Mapping[str, Any]]) -> List[ApproverOption]:
    """Filter directory members and map them to selectable options, keeping order."""

    return [
        ApproverOption(user_id=member["id"], label=display_label(member))
        for member in members
        if is_eligible_approver(member)
    ]


def fetch_approver_options(slack_client: SlackClient) -> List[ApproverOption]:
    """Read the whole workspace directory and return the approver candidates.

    Nothing is cached: every call issues a fresh ``users.list`` walk.
    """

    return to_approver_options(slack_client.iter_users())
