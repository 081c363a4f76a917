"""Unit test configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from space_migrator.core.config import MigrationConfig
from space_migrator.core.context import MigrationContext
from space_migrator.core.state import RunState
from space_migrator.services.teams_adapter import TeamsAdapter
from space_migrator.services.user_resolver import UserResolver

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def no_sleep():
    """Throttling and provisioning pauses are skipped in unit tests."""
    with patch("time.sleep") as mock_sleep:
        yield mock_sleep


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------


def make_message(
    email: str | None = "alice@example.com",
    text: str = "hello",
    timestamp: int = 1609459200000,
    name: str = "alice",
    class_name: str = "CUserPrincipalDetails",
    **overrides: Any,
) -> dict[str, Any]:
    """Build a dict resembling a staged Space message.

    ``email=None`` builds an author without details (a deleted user).
    """
    details: dict[str, Any] | None = None
    if email is not None:
        details = {"className": class_name, "user": {"emails": [{"email": email}]}}
    d: dict[str, Any] = {
        "author": {"name": name, "details": details},
        "created": {"iso": "", "timestamp": timestamp},
        "text": text,
        "archived": False,
    }
    d.update(overrides)
    return d


def make_channel_record(
    channel_id: str = "ch1",
    name: str = "eng-backend",
    timestamp: int = 1609459200000,
    **overrides: Any,
) -> dict[str, Any]:
    """Build a dict resembling a staged Space channel record."""
    d: dict[str, Any] = {
        "channelId": channel_id,
        "name": name,
        "description": "",
        "created": {"iso": "", "timestamp": timestamp},
        "totalMessages": 0,
    }
    d.update(overrides)
    return d


def make_http_error(
    status: int = 500,
    reason: str = "Internal Server Error",
    message: str = "boom",
) -> requests.HTTPError:
    """Build an HTTPError carrying a Graph-style JSON error response."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = json.dumps({"error": {"message": message}}).encode()
    return requests.HTTPError(f"{status} {reason}", response=response)


def make_ctx(
    config: MigrationConfig | None = None,
    staging_root: Path | None = None,
    output_dir: str | None = None,
) -> MigrationContext:
    """Build a MigrationContext with sensible test defaults."""
    return MigrationContext(
        staging_root=staging_root or Path("/tmp/test_staging"),
        output_dir=output_dir,
        config=config or MigrationConfig(),
    )


def make_teams_mock() -> MagicMock:
    """A TeamsAdapter mock that keeps the real static body builder."""
    teams = MagicMock(spec=TeamsAdapter)
    teams.build_channel_body = TeamsAdapter.build_channel_body
    return teams


@pytest.fixture()
def config():
    return MigrationConfig(fallback_member_email="admin@example.com")


@pytest.fixture()
def ctx(config):
    return make_ctx(config)


@pytest.fixture()
def state(config):
    return RunState.for_budget(config.retry_budget)


@pytest.fixture()
def teams():
    return make_teams_mock()


@pytest.fixture()
def user_resolver(sample_users, config):
    return UserResolver(sample_users, config)
