"""
Functions for managing Teams teams during the Space migration.

Handles the destructive pre-run cleanup of previously migrated teams,
team creation in migration mode (including waiting for asynchronous
provisioning), completion of team migration, and adding members.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime

import requests

from space_migrator.core.context import MigrationContext
from space_migrator.core.mapping import is_general_channel
from space_migrator.core.retry import call_with_retry, log_http_error
from space_migrator.core.state import RunState
from space_migrator.exceptions import (
    RetryBudgetExhaustedError,
    TeamCreationError,
    UnclassifiedRemoteError,
)
from space_migrator.services.teams_adapter import TeamsAdapter
from space_migrator.services.user_resolver import UserResolver
from space_migrator.types import GraphTeam
from space_migrator.utils.api import is_classified_error
from space_migrator.utils.logging import log_with_context


def remove_teams(
    ctx: MigrationContext,
    state: RunState,
    teams: TeamsAdapter,
    team_names: list[str],
) -> int:
    """Delete every existing team whose name is one of ``team_names``.

    All non-general channels of each matching team are deleted first, then
    the Microsoft 365 group backing the team.

    Returns:
        Number of teams removed.
    """
    budget = state.retry_budget
    delay = ctx.config.retry_delay
    wanted = set(team_names)

    log_with_context(logging.INFO, "Get all teams")
    all_teams = call_with_retry(budget, "list teams", teams.list_teams, retry_delay=delay)
    log_with_context(logging.INFO, f"Found {len(all_teams)} teams")

    removed = 0
    for team in all_teams:
        name = team.get("displayName", "")
        if name not in wanted:
            continue

        team_id = team["id"]
        channels = call_with_retry(
            budget, "list channels", teams.list_channels, team_id, retry_delay=delay
        )
        for channel in channels:
            if is_general_channel(channel.get("displayName", "")):
                continue
            log_with_context(
                logging.INFO,
                f'Remove channel "{channel.get("displayName")}" in team "{name}"',
                team=name,
            )
            call_with_retry(
                budget,
                "delete channel",
                teams.delete_channel,
                team_id,
                channel["id"],
                retry_delay=delay,
            )

        log_with_context(logging.INFO, f'Remove group "{name}"', team=name)
        call_with_retry(
            budget, "delete group", teams.delete_group, team_id, retry_delay=delay
        )
        removed += 1

    return removed


def find_team(teams: TeamsAdapter, name: str) -> GraphTeam | None:
    """Return the first team whose display name equals ``name``."""
    log_with_context(logging.INFO, f'Searching for team "{name}"')
    for team in teams.list_teams():
        if team.get("displayName") == name:
            return team
    return None


def create_team(
    ctx: MigrationContext,
    state: RunState,
    teams: TeamsAdapter,
    name: str,
    created: datetime,
) -> GraphTeam:
    """Create a team in migration mode and wait until it is visible.

    Each lookup that does not find the team yet (or fails with an HTTP
    status) spends one unit of the retry budget.

    Raises:
        TeamCreationError: The team never became visible.
        UnclassifiedRemoteError: A lookup failed without an HTTP status.
    """
    config = ctx.config
    log_with_context(logging.INFO, f'Create team "{name}"', team=name)
    call_with_retry(
        state.retry_budget,
        "create team",
        teams.create_team,
        name,
        config.team_description,
        created,
        retry_delay=config.retry_delay,
    )

    while True:
        try:
            state.retry_budget.use("wait for team")
        except RetryBudgetExhaustedError as e:
            raise TeamCreationError(f'Unable to create team "{name}"') from e

        time.sleep(config.team_poll_interval)
        try:
            team = find_team(teams, name)
        except requests.RequestException as e:
            if not is_classified_error(e):
                raise UnclassifiedRemoteError("search team", e) from e
            log_http_error(e, "search team")  # type: ignore[arg-type]
            continue

        if team and team.get("id"):
            state.retry_budget.reset()
            state.summary["teams_created"].append(name)
            log_with_context(logging.INFO, f'Team "{name}" is ready', team=name)
            return team


def complete_team_migration(
    ctx: MigrationContext, state: RunState, teams: TeamsAdapter, team_id: str
) -> None:
    log_with_context(logging.INFO, "Completing team migration.")
    call_with_retry(
        state.retry_budget,
        "complete team migration",
        teams.complete_team_migration,
        team_id,
        retry_delay=ctx.config.retry_delay,
    )


def add_members_to_team(
    ctx: MigrationContext,
    state: RunState,
    teams: TeamsAdapter,
    user_resolver: UserResolver,
    team_id: str,
    member_mails: list[str],
) -> int:
    """Add the mapped members to a team in one batch; the first one becomes owner.

    Emails that are not in the directory are logged and left out.

    Returns:
        Number of members submitted.
    """
    if not member_mails:
        log_with_context(logging.INFO, "No members mapped for this team")
        return 0

    time.sleep(ctx.config.settle_sleep)
    log_with_context(logging.INFO, f"Add {len(member_mails)} members to team:")

    members: list[tuple[str, list[str]]] = []
    for index, mail in enumerate(member_mails):
        user = user_resolver.get_member(mail)
        if user is None:
            log_with_context(
                logging.WARNING,
                f'Member "{mail}" not found in the directory, not added'
                + (" (intended owner)" if index == 0 else ""),
            )
            continue
        roles = ["owner"] if index == 0 else []
        log_with_context(logging.INFO, f'- "{user.get("displayName", mail)}"')
        members.append((user["id"], roles))

    if not members:
        return 0

    call_with_retry(
        state.retry_budget,
        "add members",
        teams.add_members,
        team_id,
        members,
        retry_delay=ctx.config.retry_delay,
    )
    time.sleep(ctx.config.settle_sleep)
    state.summary["members_added"] += len(members)
    return len(members)
