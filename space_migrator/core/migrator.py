"""
Main migrator class for the Space to Teams migration tool.

Drives the import stage: directory lookup, destructive pre-run cleanup, and
per-team creation, channel import, completion and membership.
"""

from __future__ import annotations

import logging
import time

from space_migrator.core.channel_processor import ChannelProcessor
from space_migrator.core.context import MigrationContext
from space_migrator.core.mapping import MappingResolver
from space_migrator.core.migration_logging import (
    log_migration_failure,
    log_migration_success,
)
from space_migrator.core.retry import call_with_retry
from space_migrator.core.state import RunState
from space_migrator.services.team_creator import (
    add_members_to_team,
    complete_team_migration,
    create_team,
    remove_teams,
)
from space_migrator.services.teams_adapter import TeamsAdapter
from space_migrator.services.user_resolver import UserResolver
from space_migrator.types import MigrationSummary
from space_migrator.utils.formatting import format_number
from space_migrator.utils.logging import log_with_context


class TeamsMigrator:
    """Imports staged Space channels into Microsoft Teams."""

    def __init__(
        self,
        ctx: MigrationContext,
        teams: TeamsAdapter,
        resolver: MappingResolver,
    ) -> None:
        self.ctx = ctx
        self.teams = teams
        self.resolver = resolver
        self.state = RunState.for_budget(ctx.config.retry_budget)
        self.user_resolver: UserResolver | None = None
        self.channel_processor: ChannelProcessor | None = None

    def load_users(self) -> UserResolver:
        """Collect the directory users once per run."""
        log_with_context(logging.INFO, "Collect users")
        users = call_with_retry(
            self.state.retry_budget,
            "list users",
            self.teams.list_users,
            retry_delay=self.ctx.config.retry_delay,
        )
        log_with_context(logging.INFO, f"Found {format_number(len(users))} users")
        self.user_resolver = UserResolver(users, self.ctx.config)
        self.channel_processor = ChannelProcessor(
            self.ctx, self.state, self.teams, self.user_resolver
        )
        return self.user_resolver

    def migrate(self) -> MigrationSummary:
        """Run the full import.

        Returns:
            The run's summary counters.

        Raises:
            MigratorError: Any fatal condition; progress so far is logged first.
        """
        start_time = time.time()
        log_with_context(logging.INFO, "Starting import process")
        try:
            self.load_users()

            team_names = self.resolver.teams()
            log_with_context(
                logging.INFO, f"Remove existing teams: {', '.join(team_names)}"
            )
            removed = remove_teams(self.ctx, self.state, self.teams, team_names)
            log_with_context(logging.INFO, f"Removed {removed} teams")

            for team_name in team_names:
                self.migrate_team(team_name)
        except BaseException as e:
            log_migration_failure(self, e, time.time() - start_time)
            raise

        log_migration_success(self, time.time() - start_time)
        return self.state.summary

    def migrate_team(self, team_name: str) -> str:
        """Create one team and import all of its channels.

        Returns:
            The new team's id.
        """
        if self.user_resolver is None or self.channel_processor is None:
            self.load_users()
        assert self.user_resolver is not None
        assert self.channel_processor is not None

        self.state.current_team = team_name
        channels = self.resolver.channels_for_team(team_name)
        created = self.resolver.team_created_at(team_name, channels)

        log_with_context(logging.INFO, "")
        log_with_context(
            logging.INFO,
            f'Team "{team_name}": {len(channels)} channels, created {created.isoformat()}',
            team=team_name,
        )

        team = create_team(self.ctx, self.state, self.teams, team_name, created)
        team_id = team["id"]

        for staged in channels:
            self.channel_processor.process_channel(team_id, team_name, staged)

        self.channel_processor.complete_general_channel_migration(team_id, team_name)
        complete_team_migration(self.ctx, self.state, self.teams, team_id)
        add_members_to_team(
            self.ctx,
            self.state,
            self.teams,
            self.user_resolver,
            team_id,
            self.resolver.members_for_team(team_name),
        )

        self.state.current_team = None
        return team_id
