"""Shared test fixtures for the space_migrator test suite."""

import json
import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_migrator_logger():
    """Detach handlers left behind by setup_logger() between tests."""
    yield
    logger = logging.getLogger("space_migrator")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture()
def sample_users():
    """Return a list of sample Graph user dicts."""
    return [
        {"id": "u-alice", "displayName": "Alice Smith", "mail": "alice@example.com"},
        {"id": "u-bob", "displayName": "Bob Jones", "mail": "bob@example.com"},
        {"id": "u-admin", "displayName": "Admin", "mail": "admin@example.com"},
        {"id": "u-nomail", "displayName": "Room", "mail": None},
    ]


@pytest.fixture()
def sample_channels():
    """Return a list of sample Space channel records."""
    return [
        {
            "channelId": "ch1",
            "name": "eng-general",
            "description": "Engineering talk",
            "created": {"iso": "2021-03-01T10:00:00.000Z", "timestamp": 1614592800000},
            "totalMessages": 2,
        },
        {
            "channelId": "ch2",
            "name": "eng-backend",
            "description": "",
            "created": {"iso": "2021-01-01T00:00:00.000Z", "timestamp": 1609459200000},
            "totalMessages": 3,
        },
        {
            "channelId": "ch3",
            "name": "random",
            "description": None,
            "created": {"iso": "2022-01-01T00:00:00.000Z", "timestamp": 1640995200000},
            "totalMessages": 0,
        },
    ]


@pytest.fixture()
def staging_dir(tmp_path, sample_channels):
    """Create a staged export: manifest plus channel.json/messages.json per channel.

    Returns the staging root so tests can add more files as needed.
    """
    from tests.unit.conftest import make_message

    root = tmp_path / "staging"
    root.mkdir()
    (root / "manifest.json").write_text(
        json.dumps({"schema_version": 1, "exported_at": "2024-01-01T00:00:00+00:00"})
    )

    messages = {
        "ch1": [
            make_message("alice@example.com", "hi all", 1614592800000),
            make_message("bob@example.com", "hello", 1614592800500),
        ],
        "ch2": [
            make_message("alice@example.com", "first", 1609459200000),
            make_message("alice@example.com", "", 1609459201000),
            make_message("bob@example.com", "third", 1609459202000),
        ],
        "ch3": [],
    }
    for channel in sample_channels:
        ch_dir = root / channel["channelId"]
        ch_dir.mkdir()
        (ch_dir / "channel.json").write_text(json.dumps(channel))
        (ch_dir / "messages.json").write_text(
            json.dumps(messages[channel["channelId"]])
        )

    return root
