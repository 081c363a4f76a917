"""Unit tests for the TeamsMigrator import flow."""

from __future__ import annotations

import pytest

from space_migrator.core.config import MigrationConfig
from space_migrator.core.mapping import MappingResolver
from space_migrator.core.migrator import TeamsMigrator
from space_migrator.core.staging import StagingStore
from space_migrator.exceptions import ChannelCreationError
from tests.unit.conftest import make_ctx, make_teams_mock

GENERAL = {"id": "gen", "displayName": "General"}


def _make_migrator(staging_dir, sample_users, **config_kwargs):
    config_kwargs.setdefault("team_mapping", {"Engineering": ["eng-"]})
    config_kwargs.setdefault(
        "member_mapping", {"Engineering": ["alice@example.com", "bob@example.com"]}
    )
    config = MigrationConfig(**config_kwargs)
    ctx = make_ctx(config, staging_root=staging_dir)
    teams = make_teams_mock()
    teams.list_users.return_value = sample_users
    teams.list_channels.return_value = [GENERAL]
    teams.create_channel.return_value = {"id": "c-backend"}
    teams.create_message.return_value = {"id": "m"}
    resolver = MappingResolver(StagingStore(staging_dir), config)
    return TeamsMigrator(ctx, teams, resolver), teams


class TestLoadUsers:
    """Tests for directory user loading."""

    def test_builds_resolver_and_processor(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)

        resolver = migrator.load_users()

        assert resolver.get_member("alice@example.com")["id"] == "u-alice"
        assert migrator.channel_processor is not None
        teams.list_users.assert_called_once()


class TestMigrate:
    """End-to-end tests of the import against a mocked Teams adapter."""

    def test_full_team_import(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)
        teams.list_teams.side_effect = [
            [],
            [{"id": "t1", "displayName": "Engineering"}],
        ]

        summary = migrator.migrate()

        # eng-general became the team's General channel, eng-backend a new one
        teams.patch_channel.assert_called_once()
        assert teams.patch_channel.call_args.args[:2] == ("t1", "gen")
        body = teams.create_channel.call_args.args[1]
        assert body["displayName"] == "backend"

        assert summary["teams_created"] == ["Engineering"]
        assert summary["channels_created"] == 1
        assert summary["channels_patched"] == 1
        assert summary["messages_imported"] == 4
        assert summary["messages_skipped"] == 1
        assert summary["members_added"] == 2

        teams.add_members.assert_called_once_with(
            "t1", [("u-alice", ["owner"]), ("u-bob", [])]
        )

    def test_completion_order(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)
        teams.list_teams.side_effect = [
            [],
            [{"id": "t1", "displayName": "Engineering"}],
        ]

        migrator.migrate()

        completions = [
            (c[0], c.args)
            for c in teams.mock_calls
            if c[0] in ("complete_channel_migration", "complete_team_migration")
        ]
        assert completions == [
            ("complete_channel_migration", ("t1", "c-backend")),
            ("complete_channel_migration", ("t1", "gen")),
            ("complete_team_migration", ("t1",)),
        ]
        names = [c[0] for c in teams.mock_calls]
        assert names.index("complete_team_migration") < names.index("add_members")

    def test_message_timestamps_are_unique_and_ordered(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)
        teams.list_teams.side_effect = [
            [],
            [{"id": "t1", "displayName": "Engineering"}],
        ]

        migrator.migrate()

        per_channel: dict[str, list[str]] = {}
        for c in teams.create_message.call_args_list:
            _, channel_id, body = c.args
            per_channel.setdefault(channel_id, []).append(body["createdDateTime"])

        stamps = [s for channel in per_channel.values() for s in channel]
        assert len(stamps) == len(set(stamps)) == 4
        for channel_stamps in per_channel.values():
            assert channel_stamps == sorted(channel_stamps)
        # two source messages 500ms apart land on consecutive seconds
        assert per_channel["gen"] == [
            "2021-03-01T10:00:00.000Z",
            "2021-03-01T10:00:01.000Z",
        ]

    def test_existing_teams_are_removed_first(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)
        teams.list_teams.side_effect = [
            [{"id": "old", "displayName": "Engineering"}],
            [{"id": "t1", "displayName": "Engineering"}],
        ]

        migrator.migrate()

        teams.delete_group.assert_called_once_with("old")
        names = [c[0] for c in teams.mock_calls]
        assert names.index("delete_group") < names.index("create_team")

    def test_team_without_channels(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(
            staging_dir,
            sample_users,
            team_mapping={},
            member_mapping={"Support": ["admin@example.com"]},
        )
        teams.list_teams.side_effect = [[], [{"id": "t9", "displayName": "Support"}]]

        summary = migrator.migrate()

        assert summary["teams_created"] == ["Support"]
        teams.create_message.assert_not_called()
        teams.complete_channel_migration.assert_called_once_with("t9", "gen")
        teams.add_members.assert_called_once_with("t9", [("u-admin", ["owner"])])

    def test_failure_records_position_and_propagates(self, staging_dir, sample_users):
        migrator, teams = _make_migrator(staging_dir, sample_users)
        teams.list_teams.side_effect = [
            [],
            [{"id": "t1", "displayName": "Engineering"}],
        ]
        teams.create_channel.return_value = {}

        with pytest.raises(ChannelCreationError):
            migrator.migrate()

        assert migrator.state.current_team == "Engineering"
        assert migrator.state.current_channel == "eng-backend"
        teams.complete_team_migration.assert_not_called()
        teams.add_members.assert_not_called()
