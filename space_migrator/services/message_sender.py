"""
Sending staged Space messages into a Teams channel.

Per-message failures are not fatal: a message whose creation fails with an
HTTP status is parked in the run state's failed-message map and retried
later by the channel processor.
"""

from __future__ import annotations

import logging

import requests

from space_migrator.core.state import RunState
from space_migrator.exceptions import UnclassifiedRemoteError
from space_migrator.services.teams_adapter import TeamsAdapter, to_graph_datetime
from space_migrator.services.user_resolver import UserResolver
from space_migrator.types import GraphUser, MessageRecord, MessageResult, SendResult
from space_migrator.utils.api import http_error_details, is_classified_error
from space_migrator.utils.logging import log_failed_message, log_with_context


def build_message_body(
    message: MessageRecord, member: GraphUser, created: str
) -> dict:
    """Build a Graph chatMessage attributed to ``member`` at ``created``."""
    return {
        "createdDateTime": created,
        "from": {
            "user": {
                "id": member["id"],
                "displayName": member.get("displayName", ""),
                "userIdentityType": "aadUser",
            }
        },
        "body": {"contentType": "html", "content": message.get("text", "")},
    }


def skip_reason(message: MessageRecord, user_resolver: UserResolver) -> MessageResult | None:
    """Why a message is dropped before any identity lookup, if it is."""
    if user_resolver.is_system_author(message):
        return MessageResult.SYSTEM_AUTHOR
    if not (message.get("text") or "").strip():
        return MessageResult.EMPTY_TEXT
    return None


def send_message(
    state: RunState,
    teams: TeamsAdapter,
    user_resolver: UserResolver,
    team_id: str,
    channel_id: str,
    index: int,
    message: MessageRecord,
    channel: str | None = None,
) -> SendResult:
    """Import one staged message.

    Args:
        state: The run state (timestamps and failed-message map).
        teams: Graph adapter.
        user_resolver: Directory lookup for the author.
        team_id: Destination team id.
        channel_id: Destination channel id.
        index: Position of the message in the staged channel.
        message: The staged message.
        channel: Channel name for log routing.

    Returns:
        A SendResult that is either a success, a skip, or a failure.

    Raises:
        UnclassifiedRemoteError: Creation failed without an HTTP status.
    """
    reason = skip_reason(message, user_resolver)
    if reason is not None:
        log_with_context(
            logging.DEBUG,
            f"Skipped message {index + 1} ({reason.value})",
            channel=channel,
        )
        return SendResult(skipped=reason)

    member = user_resolver.resolve_author(message, channel)
    if member is None:
        return SendResult(skipped=MessageResult.UNRESOLVED_AUTHOR)

    created = state.timestamps.assign(int(message["created"]["timestamp"]))
    body = build_message_body(message, member, to_graph_datetime(created))

    try:
        result = teams.create_message(team_id, channel_id, body)
    except requests.RequestException as e:
        if not is_classified_error(e):
            log_with_context(
                logging.ERROR,
                f"Failed message import on message {index + 1}",
                channel=channel,
            )
            raise UnclassifiedRemoteError("create message", e) from e

        status, phrase, error_message = http_error_details(e)  # type: ignore[arg-type]
        log_failed_message(
            channel or "",
            team_id,
            channel_id,
            index,
            dict(message),
            status,
            phrase,
            error_message,
        )
        state.failed_messages[index] = message
        return SendResult(error=error_message, error_code=status)

    state.failed_messages.pop(index, None)
    return SendResult(message_id=result.get("id", ""))
