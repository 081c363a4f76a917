"""
Resolution of staged channels and members into destination teams.

A staged channel belongs to a team when the team's pattern list contains
either the channel's full name or the channel's prefix: the text before the
first ``-`` plus the ``-`` itself (``eng-backend`` has prefix ``eng-``). A name
without a ``-`` has itself plus ``-`` as prefix, so ``eng`` joins ``eng-``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from space_migrator.constants import CHANNEL_PREFIX_DELIMITER, GENERAL_CHANNEL_NAME
from space_migrator.core.config import MigrationConfig
from space_migrator.core.staging import StagingStore
from space_migrator.types import ChannelRecord, MessageRecord
from space_migrator.utils.logging import log_with_context


def channel_prefix(channel_name: str) -> str:
    """Return ``"<token>-"`` where token is the text before the first ``-``."""
    return channel_name.split(CHANNEL_PREFIX_DELIMITER, 1)[0] + CHANNEL_PREFIX_DELIMITER


def channel_matches(channel_name: str, patterns: list[str]) -> bool:
    """True when the channel name or its prefix appears in ``patterns``."""
    if channel_name in patterns:
        return True
    return channel_prefix(channel_name) in patterns


def destination_channel_name(
    channel_name: str, patterns: list[str], strip_prefix: bool = True
) -> str:
    """Name the channel gets inside its team.

    Channels matched through a prefix pattern lose that prefix
    (``eng-general`` in a team mapped with ``eng-`` becomes ``general``);
    channels matched by exact name keep it.
    """
    if not strip_prefix or channel_name in patterns:
        return channel_name
    prefix = channel_prefix(channel_name)
    if prefix not in patterns:
        return channel_name
    remainder = channel_name[len(prefix):]
    return remainder or channel_name


def is_general_channel(name: str) -> bool:
    """True when a channel name designates the team's General channel."""
    return name.strip().lower() == GENERAL_CHANNEL_NAME.lower()


@dataclass
class StagedChannel:
    """A staged channel resolved to a team, with lazily loaded messages."""

    record: ChannelRecord
    destination_name: str
    _loader: Callable[[], list[MessageRecord]] = field(repr=False)
    _messages: list[MessageRecord] | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.record["name"]

    @property
    def created_ms(self) -> int:
        return int(self.record["created"]["timestamp"])

    @property
    def messages(self) -> list[MessageRecord]:
        if self._messages is None:
            self._messages = self._loader()
        return self._messages


class MappingResolver:
    """Groups staged channels and member emails into teams."""

    def __init__(self, store: StagingStore, config: MigrationConfig) -> None:
        self.store = store
        self.team_mapping = config.team_mapping
        self.member_mapping = config.member_mapping
        self.strip_prefix = config.strip_channel_prefix
        self._records: list[ChannelRecord] | None = None

    def _staged_records(self) -> list[ChannelRecord]:
        if self._records is None:
            self._records = list(self.store.iter_channels())
        return self._records

    def teams(self) -> list[str]:
        """Mapped team names: team mapping order, then member-only teams."""
        names = list(self.team_mapping)
        names.extend(t for t in self.member_mapping if t not in self.team_mapping)
        return names

    def members_for_team(self, team_name: str) -> list[str]:
        return list(self.member_mapping.get(team_name, []))

    def channels_for_team(self, team_name: str) -> list[StagedChannel]:
        """Staged channels assigned to a team, in staging order."""
        patterns = self.team_mapping.get(team_name)
        if not patterns:
            return []

        channels: list[StagedChannel] = []
        for record in self._staged_records():
            if not channel_matches(record["name"], patterns):
                continue
            channel_id = record["channelId"]
            channels.append(
                StagedChannel(
                    record=record,
                    destination_name=destination_channel_name(
                        record["name"], patterns, self.strip_prefix
                    ),
                    _loader=lambda cid=channel_id: self.store.load_messages(cid),
                )
            )
        self._resolve_name_collisions(team_name, channels)
        return channels

    @staticmethod
    def _resolve_name_collisions(team_name: str, channels: list[StagedChannel]) -> None:
        """Give channels whose stripped names clash inside a team their full names.

        Teams channel names are unique per team regardless of case, and a
        fallback name can clash with another stripped name, so this repeats
        until nothing changes.
        """
        while True:
            by_name: dict[str, list[StagedChannel]] = {}
            for channel in channels:
                by_name.setdefault(channel.destination_name.lower(), []).append(channel)

            renamed = False
            for clashing in by_name.values():
                if len(clashing) < 2:
                    continue
                for channel in clashing:
                    if channel.destination_name == channel.name:
                        continue
                    log_with_context(
                        logging.WARNING,
                        f'Channel "{channel.name}" would be named '
                        f'"{channel.destination_name}" like another channel, '
                        "keeping its full name",
                        team=team_name,
                    )
                    channel.destination_name = channel.name
                    renamed = True
            if not renamed:
                return

    def team_created_at(
        self, team_name: str, channels: list[StagedChannel] | None = None
    ) -> datetime:
        """Creation time for a team: its oldest channel's creation time.

        When no staged channel resolves to the team the current time is used.
        """
        if channels is None:
            channels = self.channels_for_team(team_name)

        if not channels:
            log_with_context(
                logging.WARNING,
                f'No channels resolve to team "{team_name}", using the current time '
                "as its creation date",
                team=team_name,
            )
            return datetime.now(timezone.utc).replace(microsecond=0)

        earliest = min(channel.created_ms for channel in channels)
        return datetime.fromtimestamp(earliest // 1000, tz=timezone.utc)
