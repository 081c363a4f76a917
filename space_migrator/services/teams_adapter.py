"""Typed adapter for the Microsoft Graph Teams API.

Replaces raw ``client.post("teams/...")`` URL building with explicit method
calls that are easier to mock, test, and type-check.

The adapter does **not** add retry logic; callers wrap each call with
:func:`space_migrator.core.retry.call_with_retry`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from space_migrator.constants import (
    MIGRATION_MODE,
    TEAMS_TEMPLATE_BIND,
    USER_BIND_TEMPLATE,
)
from space_migrator.types import GraphChannel, GraphTeam, GraphUser


def to_graph_datetime(value: datetime) -> str:
    """Render a datetime as the ISO 8601 UTC string Graph expects."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.000Z")


class TeamsAdapter:
    """Thin typed wrapper around the Graph API client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    # -- Users ----------------------------------------------------------------

    def list_users(self) -> list[GraphUser]:
        """List all users of the organization (every page).

        Returns:
            User dicts with ``id``, ``displayName`` and ``mail``.
        """
        return list(
            self._client.iter_pages(
                "users",
                params={"$select": "id,displayName,mail,userPrincipalName"},
            )
        )

    # -- Teams ----------------------------------------------------------------

    def list_teams(self) -> list[GraphTeam]:
        """List all teams in the organization (every page)."""
        return list(self._client.iter_pages("teams"))

    def get_team(self, team_id: str) -> GraphTeam:
        """Get a single team by id."""
        result: GraphTeam = self._client.get(f"teams/{team_id}")
        return result

    def create_team(
        self, display_name: str, description: str, created: datetime
    ) -> dict[str, Any]:
        """Request creation of a private team in migration mode.

        Provisioning is asynchronous: Graph answers ``202 Accepted`` and the
        team shows up in :meth:`list_teams` some time later.

        Args:
            display_name: Team name.
            description: Team description.
            created: Historical creation time.

        Returns:
            API response dict (usually empty).
        """
        body = {
            "@microsoft.graph.teamCreationMode": MIGRATION_MODE,
            "template@odata.bind": TEAMS_TEMPLATE_BIND,
            "displayName": display_name,
            "description": description,
            "visibility": "private",
            "createdDateTime": to_graph_datetime(created),
        }
        result: dict[str, Any] = self._client.post("teams", json_body=body)
        return result

    def complete_team_migration(self, team_id: str) -> dict[str, Any]:
        """End migration mode for a team."""
        result: dict[str, Any] = self._client.post(f"teams/{team_id}/completeMigration")
        return result

    def delete_group(self, group_id: str) -> dict[str, Any]:
        """Delete the Microsoft 365 group backing a team."""
        result: dict[str, Any] = self._client.delete(f"groups/{group_id}")
        return result

    # -- Channels -------------------------------------------------------------

    def list_channels(self, team_id: str) -> list[GraphChannel]:
        """List the channels of a team."""
        return list(self._client.iter_pages(f"teams/{team_id}/channels"))

    def get_channel(self, team_id: str, channel_id: str) -> GraphChannel:
        """Get a single channel."""
        result: GraphChannel = self._client.get(
            f"teams/{team_id}/channels/{channel_id}"
        )
        return result

    @staticmethod
    def build_channel_body(
        display_name: str | None,
        description: str | None,
        created: datetime,
    ) -> dict[str, Any]:
        """Build a migration-mode channel body.

        Args:
            display_name: Channel name; ``None`` leaves the name untouched
                (used when patching the default channel).
            description: Optional description; omitted when empty.
            created: Historical creation time.
        """
        body: dict[str, Any] = {
            "@microsoft.graph.channelCreationMode": MIGRATION_MODE,
            "membershipType": "standard",
            "createdDateTime": to_graph_datetime(created),
        }
        if display_name is not None:
            body["displayName"] = display_name
        if description:
            body["description"] = description
        return body

    def create_channel(self, team_id: str, body: dict[str, Any]) -> GraphChannel:
        """Create a channel in a team."""
        result: GraphChannel = self._client.post(
            f"teams/{team_id}/channels", json_body=body
        )
        return result

    def patch_channel(
        self, team_id: str, channel_id: str, body: dict[str, Any]
    ) -> GraphChannel:
        """Update a channel; returns the patched channel when Graph echoes it."""
        result: GraphChannel = self._client.patch(
            f"teams/{team_id}/channels/{channel_id}", json_body=body
        )
        return result

    def delete_channel(self, team_id: str, channel_id: str) -> dict[str, Any]:
        """Delete a channel."""
        result: dict[str, Any] = self._client.delete(
            f"teams/{team_id}/channels/{channel_id}"
        )
        return result

    def complete_channel_migration(
        self, team_id: str, channel_id: str
    ) -> dict[str, Any]:
        """End migration mode for a channel."""
        result: dict[str, Any] = self._client.post(
            f"teams/{team_id}/channels/{channel_id}/completeMigration"
        )
        return result

    # -- Messages -------------------------------------------------------------

    def create_message(
        self, team_id: str, channel_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Post a (historical) message into a channel.

        Args:
            team_id: Team id.
            channel_id: Channel id.
            body: chatMessage body including ``from`` and ``createdDateTime``.

        Returns:
            Created message resource dict.
        """
        result: dict[str, Any] = self._client.post(
            f"teams/{team_id}/channels/{channel_id}/messages", json_body=body
        )
        return result

    # -- Members --------------------------------------------------------------

    def add_members(
        self, team_id: str, members: list[tuple[str, list[str]]]
    ) -> dict[str, Any]:
        """Add several members to a team in one request.

        Args:
            team_id: Team id.
            members: ``(user_id, roles)`` pairs; ``roles`` is ``["owner"]``
                for owners and empty for plain members.

        Returns:
            API response dict with per-member results.
        """
        body = {
            "values": [
                {
                    "@odata.type": "microsoft.graph.aadUserConversationMember",
                    "roles": roles,
                    "user@odata.bind": USER_BIND_TEMPLATE.format(user_id=user_id),
                }
                for user_id, roles in members
            ]
        }
        result: dict[str, Any] = self._client.post(
            f"teams/{team_id}/members/add", json_body=body
        )
        return result
