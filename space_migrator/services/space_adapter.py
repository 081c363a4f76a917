"""Typed adapter for the JetBrains Space chats API.

Wraps the two read calls the export needs behind explicit methods that are
easy to mock and test. The adapter does **not** retry: export failures are
surfaced to the caller as they happen.
"""

from __future__ import annotations

from typing import Any

from space_migrator.constants import (
    CHANNEL_PAGE_SIZE,
    MESSAGE_BATCH_SIZE,
    SPACE_MESSAGE_SORTING,
)
from space_migrator.types import ChannelRecord, MessagePage

CHANNEL_FIELDS = "next,totalCount,data(channelId,created,description,name,totalMessages)"
MESSAGE_FIELDS = (
    "nextStartFromDate,orgLimitReached,"
    "messages(archived,author(details(className,user(emails(email))),name),created,text)"
)


class SpaceAdapter:
    """Thin typed wrapper around the Space HTTP API client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def list_channels(self, page_size: int = CHANNEL_PAGE_SIZE) -> list[ChannelRecord]:
        """List all non-archived channels, following the ``next`` cursor.

        Args:
            page_size: Maximum channels per page.

        Returns:
            Channel records in the order Space returns them.
        """
        channels: list[ChannelRecord] = []
        skip: str | None = None

        while True:
            params: dict[str, Any] = {
                "query": "",
                "withArchived": "false",
                "$top": page_size,
                "$fields": CHANNEL_FIELDS,
            }
            if skip:
                params["$skip"] = skip

            batch = self._client.get("chats/channels/all-channels", params=params)
            data = batch.get("data", [])
            channels.extend(data)

            next_skip = batch.get("next")
            if not data or not next_skip or next_skip == skip:
                return channels
            total = batch.get("totalCount")
            if total is not None and len(channels) >= total:
                return channels
            skip = next_skip

    def get_channel_messages(
        self,
        channel_id: str,
        start_from_date: str | None = None,
        batch_size: int = MESSAGE_BATCH_SIZE,
    ) -> MessagePage:
        """Fetch one page of channel messages, oldest first.

        Args:
            channel_id: Space channel id.
            start_from_date: ISO cursor from the previous page's
                ``nextStartFromDate``; ``None`` for the first page.
            batch_size: Maximum messages per page.

        Returns:
            Page dict with ``messages``, ``nextStartFromDate`` and
            ``orgLimitReached`` keys.
        """
        params: dict[str, Any] = {
            "channel": f"id:{channel_id}",
            "sorting": SPACE_MESSAGE_SORTING,
            "batchSize": batch_size,
            "$fields": MESSAGE_FIELDS,
        }
        if start_from_date is not None:
            params["startFromDate"] = start_from_date

        result: MessagePage = self._client.get("chats/messages", params=params)
        return result
