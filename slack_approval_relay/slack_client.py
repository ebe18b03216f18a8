"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from slack_sdk import WebClient

USERS_PAGE_SIZE = 200


class SlackClient:
    """Encapsulate the Slack Web API calls the relay makes.

    One instance is built at startup and shared by every handler; it holds no
    mutable state of its own.
    """

    def __init__(self, *, token: str | None = None, client: WebClient | None = None) -> None:
        if client is None and token is None:
            raise ValueError("Either an instantiated client or a bot token must be provided.")

        # No retry handlers: every Web API call is attempted exactly once.
        self._client = client or WebClient(token=token, retry_handlers=[])

    @property
    def client(self) -> WebClient:
        """Expose the underlying WebClient for advanced use cases."""

        return self._client

    def iter_users(self, *, page_size: int = USERS_PAGE_SIZE) -> Iterator[Mapping[str, Any]]:
        """Yield every workspace member, following ``users.list`` pagination."""

        cursor: str | None = None
        while True:
            kwargs: dict[str, Any] = {"limit": page_size}
            if cursor:
                kwargs["cursor"] = cursor
            response = self._client.users_list(**kwargs)
            yield from response.get("members") or []

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return

    def open_view(self, *, trigger_id: str, view: Mapping[str, Any]) -> Mapping[str, Any]:
        """Open a modal against a short-lived trigger handle."""

        return self._client.views_open(trigger_id=trigger_id, view=dict(view))

    def post_message(
        self,
        *,
        channel: str,
        text: str,
        blocks: Sequence[Mapping[str, Any]] | None = None,
    ) -> Mapping[str, Any]:
        """Post a message, optionally with Block Kit content.

        Passing a user id as *channel* delivers a direct message from the bot.
        """

        if blocks is None:
            return self._client.chat_postMessage(channel=channel, text=text)
        return self._client.chat_postMessage(channel=channel, text=text, blocks=list(blocks))
