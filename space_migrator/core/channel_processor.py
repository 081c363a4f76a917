"""Channel-level processing logic extracted from the main migrator."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Iterable

import requests
from tqdm import tqdm

from space_migrator.constants import GENERAL_CHANNEL_NAME
from space_migrator.core.context import MigrationContext
from space_migrator.core.mapping import StagedChannel, is_general_channel
from space_migrator.core.retry import call_with_retry, log_http_error
from space_migrator.core.state import RunState
from space_migrator.exceptions import (
    ChannelCreationError,
    RetryBudgetExhaustedError,
    UnclassifiedRemoteError,
)
from space_migrator.services.message_sender import send_message
from space_migrator.services.teams_adapter import TeamsAdapter
from space_migrator.services.user_resolver import UserResolver
from space_migrator.types import GraphChannel, MessageRecord
from space_migrator.utils.api import is_classified_error
from space_migrator.utils.logging import (
    log_with_context,
    remove_channel_logger,
    setup_channel_logger,
)


def channel_created_at(staged: StagedChannel) -> datetime:
    return datetime.fromtimestamp(staged.created_ms // 1000, tz=timezone.utc)


class ChannelProcessor:
    """Handles per-channel processing during import."""

    def __init__(
        self,
        ctx: MigrationContext,
        state: RunState,
        teams: TeamsAdapter,
        user_resolver: UserResolver,
    ) -> None:
        self.ctx = ctx
        self.state = state
        self.teams = teams
        self.user_resolver = user_resolver

    @property
    def config(self):
        return self.ctx.config

    def process_channel(self, team_id: str, team_name: str, staged: StagedChannel) -> int:
        """Import one staged channel into a team.

        Creates the channel (or patches the team's General channel), imports
        all messages, requeues failures until none are left, then completes
        the channel's migration. The General channel is completed separately,
        after every channel of the team has been imported.

        Args:
            team_id: Destination team id.
            team_name: Destination team name, for logging.
            staged: The staged channel with its destination name.

        Returns:
            Number of messages imported.
        """
        name = staged.name
        handler = None
        if self.ctx.output_dir:
            handler = setup_channel_logger(
                self.ctx.output_dir, name, self.ctx.verbose, self.ctx.debug_api
            )

        try:
            self.state.start_channel(name)
            log_with_context(
                logging.INFO,
                f'Import channel "{name}" into team "{team_name}" '
                f'as "{staged.destination_name}"',
                channel=name,
                team=team_name,
            )

            channel = self.create_or_reuse_channel(team_id, staged)
            channel_id = channel["id"]

            messages = staged.messages
            log_with_context(
                logging.INFO,
                f"Channel ready. Import {len(messages)} messages...",
                channel=name,
            )
            imported = self.import_messages(
                team_id, channel_id, list(enumerate(messages)), name
            )
            self.state.retry_budget.reset()

            imported += self.requeue_failed_messages(team_id, channel_id, name)
            self.state.retry_budget.reset()

            log_with_context(
                logging.INFO,
                f"Channel {name} message import: imported {imported} of {len(messages)}",
                channel=name,
            )

            if not is_general_channel(staged.destination_name):
                self.complete_channel_migration(team_id, channel_id, name)
            self.state.current_channel = None
            return imported
        finally:
            if handler is not None:
                remove_channel_logger(handler)

    def create_or_reuse_channel(
        self, team_id: str, staged: StagedChannel
    ) -> GraphChannel:
        """Create the destination channel, or patch General for general channels.

        Raises:
            ChannelCreationError: No usable channel could be obtained.
        """
        if is_general_channel(staged.destination_name):
            return self._patch_general_channel(team_id, staged)

        body = TeamsAdapter.build_channel_body(
            staged.destination_name,
            staged.record.get("description") or "",
            channel_created_at(staged),
        )
        try:
            channel = call_with_retry(
                self.state.retry_budget,
                "create channel",
                self.teams.create_channel,
                team_id,
                body,
                retry_delay=self.config.retry_delay,
                channel=staged.name,
            )
        except RetryBudgetExhaustedError as e:
            raise ChannelCreationError(
                f'Unable to create channel "{staged.destination_name}"'
            ) from e

        if not channel or not channel.get("id"):
            raise ChannelCreationError(
                f'Unable to create channel "{staged.destination_name}"'
            )
        self.state.summary["channels_created"] += 1
        return channel

    def find_general_channel(self, team_id: str) -> GraphChannel | None:
        """Return the team's General channel if Graph lists it yet."""
        for channel in self.teams.list_channels(team_id):
            if is_general_channel(channel.get("displayName", "")):
                return channel
        return None

    def _wait_for_general_channel(self, team_id: str, channel: str) -> GraphChannel:
        """Poll until the freshly provisioned team exposes its General channel.

        Every poll spends one unit of the retry budget.
        """
        while True:
            try:
                self.state.retry_budget.use("wait for general channel")
            except RetryBudgetExhaustedError as e:
                raise ChannelCreationError(
                    f"General channel of team {team_id} never appeared"
                ) from e

            try:
                general = self.find_general_channel(team_id)
            except requests.RequestException as e:
                if not is_classified_error(e):
                    raise UnclassifiedRemoteError("list channels", e) from e
                log_http_error(e, "list channels", channel)  # type: ignore[arg-type]
                general = None

            if general and general.get("id"):
                self.state.retry_budget.reset()
                return general

            log_with_context(
                logging.DEBUG,
                "General channel not available yet, waiting",
                channel=channel,
            )
            time.sleep(self.config.settle_sleep)

    def _patch_general_channel(
        self, team_id: str, staged: StagedChannel
    ) -> GraphChannel:
        general = self._wait_for_general_channel(team_id, staged.name)
        body = TeamsAdapter.build_channel_body(
            None,
            staged.record.get("description") or "",
            channel_created_at(staged),
        )
        log_with_context(
            logging.INFO,
            f'Patch channel "{GENERAL_CHANNEL_NAME}" with "{staged.name}" metadata',
            channel=staged.name,
        )
        try:
            call_with_retry(
                self.state.retry_budget,
                "patch general channel",
                self.teams.patch_channel,
                team_id,
                general["id"],
                body,
                retry_delay=self.config.retry_delay,
                channel=staged.name,
            )
        except RetryBudgetExhaustedError as e:
            raise ChannelCreationError(
                f'Unable to patch the General channel for "{staged.name}"'
            ) from e
        self.state.summary["channels_patched"] += 1
        return general

    def import_messages(
        self,
        team_id: str,
        channel_id: str,
        messages: Iterable[tuple[int, MessageRecord]],
        channel: str,
        desc: str | None = None,
    ) -> int:
        """Send ``(index, message)`` pairs in order, throttled.

        Sleeps ``message_sleep`` seconds before the pass and after every
        ``messages_per_second`` messages.

        Returns:
            Number of messages created.
        """
        summary = self.state.summary
        per_second = self.config.messages_per_second
        pause = self.config.message_sleep
        imported = 0

        time.sleep(pause)
        pbar = tqdm(list(messages), desc=desc or f"Importing messages into {channel}")
        for sent, (index, message) in enumerate(pbar, start=1):
            result = send_message(
                self.state,
                self.teams,
                self.user_resolver,
                team_id,
                channel_id,
                index,
                message,
                channel,
            )
            if result.success:
                imported += 1
                summary["messages_imported"] += 1
            elif result.skipped is not None:
                summary["messages_skipped"] += 1
            else:
                summary["messages_failed"] += 1

            if sent % per_second == 0:
                time.sleep(pause)

        return imported

    def requeue_failed_messages(self, team_id: str, channel_id: str, channel: str) -> int:
        """Re-send failed messages until none are left.

        Each pass spends one unit of the retry budget; exhaustion propagates
        as RetryBudgetExhaustedError.

        Returns:
            Number of messages created by the requeue passes.
        """
        imported = 0
        while self.state.failed_messages:
            self.state.retry_budget.use("requeue failed messages")
            pending = sorted(self.state.failed_messages.items())
            log_with_context(
                logging.WARNING,
                f"Requeue {len(pending)} failed messages",
                channel=channel,
            )
            self.state.summary["messages_requeued"] += len(pending)
            imported += self.import_messages(
                team_id,
                channel_id,
                pending,
                channel,
                desc=f"Requeueing messages into {channel}",
            )
        return imported

    def complete_channel_migration(
        self, team_id: str, channel_id: str, channel: str
    ) -> None:
        """Take a channel out of migration mode."""
        log_with_context(
            logging.INFO, f'Complete migration of channel "{channel}"', channel=channel
        )
        call_with_retry(
            self.state.retry_budget,
            "complete channel migration",
            self.teams.complete_channel_migration,
            team_id,
            channel_id,
            retry_delay=self.config.retry_delay,
            channel=channel,
        )

    def complete_general_channel_migration(self, team_id: str, team_name: str) -> None:
        """Complete the General channel, with a settle pause before and after.

        Raises:
            ChannelCreationError: The team has no General channel.
        """
        time.sleep(self.config.settle_sleep)
        channels = call_with_retry(
            self.state.retry_budget,
            "list channels",
            self.teams.list_channels,
            team_id,
            retry_delay=self.config.retry_delay,
        )
        general = next(
            (c for c in channels if is_general_channel(c.get("displayName", ""))),
            None,
        )
        if general is None:
            raise ChannelCreationError(
                f'Team "{team_name}" has no {GENERAL_CHANNEL_NAME} channel'
            )

        log_with_context(
            logging.INFO,
            f'Complete migration of channel "{GENERAL_CHANNEL_NAME}"',
            team=team_name,
        )
        call_with_retry(
            self.state.retry_budget,
            "complete general channel migration",
            self.teams.complete_channel_migration,
            team_id,
            general["id"],
            retry_delay=self.config.retry_delay,
        )
        time.sleep(self.config.settle_sleep)
