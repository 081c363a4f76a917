"""Shared type definitions for the Space to Teams migration tool.

Provides TypedDicts for structured data flowing through the migration pipeline:
Space API JSON shapes (as staged on disk), Graph API response shapes, and
internal tracking types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypedDict

# ---------------------------------------------------------------------------
# Space API types (staged as channel.json / messages.json)
# ---------------------------------------------------------------------------


class SpaceDateTime(TypedDict):
    """Space timestamp pair: ISO string and epoch milliseconds."""

    iso: str
    timestamp: int


class SpaceEmail(TypedDict):
    email: str


class SpaceAuthorUser(TypedDict, total=False):
    emails: list[SpaceEmail]


class SpaceAuthorDetails(TypedDict, total=False):
    """Polymorphic author details; ``className`` tells principals apart."""

    className: str
    user: SpaceAuthorUser


class SpaceAuthor(TypedDict, total=False):
    name: str
    details: SpaceAuthorDetails | None


class ChannelRecord(TypedDict, total=False):
    """A non-archived Space channel as staged in ``channel.json``."""

    channelId: str
    name: str
    description: str | None
    created: SpaceDateTime
    totalMessages: int


class MessageRecord(TypedDict, total=False):
    """A Space channel message as staged in ``messages.json``."""

    author: SpaceAuthor
    created: SpaceDateTime
    text: str
    archived: bool


class MessagePage(TypedDict, total=False):
    """One page returned by the Space channel messages endpoint."""

    messages: list[MessageRecord]
    nextStartFromDate: SpaceDateTime | None
    orgLimitReached: bool


# ---------------------------------------------------------------------------
# Graph API types
# ---------------------------------------------------------------------------


class GraphUser(TypedDict, total=False):
    id: str
    displayName: str
    mail: str | None
    userPrincipalName: str


class GraphTeam(TypedDict, total=False):
    id: str
    displayName: str
    description: str


class GraphChannel(TypedDict, total=False):
    id: str
    displayName: str
    description: str | None
    membershipType: str


# ---------------------------------------------------------------------------
# Internal tracking types
# ---------------------------------------------------------------------------


class MigrationSummary(TypedDict):
    """Aggregate migration counters."""

    teams_created: list[str]
    channels_created: int
    channels_patched: int
    messages_imported: int
    messages_skipped: int
    messages_failed: int
    messages_requeued: int
    members_added: int


class MessageResult(str, Enum):
    """Why a message was not submitted to the Graph API."""

    SYSTEM_AUTHOR = "SYSTEM_AUTHOR"
    EMPTY_TEXT = "EMPTY_TEXT"
    UNRESOLVED_AUTHOR = "UNRESOLVED_AUTHOR"


@dataclass
class SendResult:
    """Structured result from :func:`send_message`.

    Three-state model: *success* (message created), *skipped* (permanently
    dropped, e.g. system author or empty text), or *failed* (classified
    remote error, eligible for requeue).
    """

    message_id: str | None = None
    skipped: MessageResult | None = None
    error: str | None = None
    error_code: int | None = None

    @property
    def success(self) -> bool:
        """True when the message was created in Teams."""
        return self.message_id is not None

    @property
    def failed(self) -> bool:
        """True when the message was neither sent nor intentionally skipped."""
        return not self.success and self.skipped is None
