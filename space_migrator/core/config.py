"""
Configuration module for the Space to Teams migration tool.

This module loads configuration settings from YAML files into a typed
dataclass and can write an example configuration file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from space_migrator.constants import (
    APPLICATION_PRINCIPAL_CLASS,
    DEFAULT_TEAM_DESCRIPTION,
    DELETED_AUTHOR_NAME,
    MESSAGE_BATCH_SIZE,
    MESSAGE_SLEEP,
    MESSAGES_PER_SECOND,
    RETRY_BUDGET,
    SETTLE_SLEEP,
)
from space_migrator.exceptions import ConfigError
from space_migrator.utils.logging import log_with_context


def _string_list_mapping(data: Any, key: str) -> dict[str, list[str]]:
    """Validate a ``name -> [str, ...]`` mapping from YAML."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"'{key}' must be a mapping of team name to a list")

    result: dict[str, list[str]] = {}
    for team, entries in data.items():
        if entries is None:
            entries = []
        if isinstance(entries, str):
            entries = [entries]
        if not isinstance(entries, list) or not all(
            isinstance(e, str) for e in entries
        ):
            raise ConfigError(f"'{key}.{team}' must be a list of strings")
        result[str(team)] = list(entries)
    return result


@dataclass
class MigrationConfig:
    """Typed configuration for the migration tool.

    All fields have defaults so an empty file still yields a usable config.
    """

    # Team layout
    team_mapping: dict[str, list[str]] = field(default_factory=dict)
    member_mapping: dict[str, list[str]] = field(default_factory=dict)
    strip_channel_prefix: bool = True
    team_description: str = DEFAULT_TEAM_DESCRIPTION

    # Export
    skip_channels: list[str] = field(default_factory=list)
    cleanup_staging: bool = True
    batch_size: int = MESSAGE_BATCH_SIZE

    # Authors
    fallback_member_email: str = ""
    deleted_author_name: str = DELETED_AUTHOR_NAME
    system_author_classes: list[str] = field(
        default_factory=lambda: [APPLICATION_PRINCIPAL_CLASS]
    )

    # Retry
    retry_budget: int = RETRY_BUDGET
    retry_delay: float = 0

    # Throttling
    messages_per_second: int = MESSAGES_PER_SECOND
    message_sleep: float = MESSAGE_SLEEP
    settle_sleep: float = SETTLE_SLEEP
    team_poll_interval: float = SETTLE_SLEEP

    def __post_init__(self) -> None:
        if self.retry_budget < 1:
            raise ConfigError(f"retry_budget must be at least 1, got {self.retry_budget}")
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.messages_per_second < 1:
            raise ConfigError(
                f"messages_per_second must be at least 1, got {self.messages_per_second}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationConfig:
        """Create a MigrationConfig from a raw config dictionary."""
        defaults = cls()
        return cls(
            team_mapping=_string_list_mapping(data.get("team_mapping"), "team_mapping"),
            member_mapping=_string_list_mapping(
                data.get("member_mapping"), "member_mapping"
            ),
            strip_channel_prefix=data.get(
                "strip_channel_prefix", defaults.strip_channel_prefix
            ),
            team_description=data.get("team_description", defaults.team_description),
            skip_channels=data.get("skip_channels") or [],
            cleanup_staging=data.get("cleanup_staging", defaults.cleanup_staging),
            batch_size=data.get("batch_size", defaults.batch_size),
            fallback_member_email=data.get("fallback_member_email") or "",
            deleted_author_name=data.get(
                "deleted_author_name", defaults.deleted_author_name
            ),
            system_author_classes=data.get("system_author_classes")
            or defaults.system_author_classes,
            retry_budget=data.get("retry_budget", defaults.retry_budget),
            retry_delay=data.get("retry_delay", defaults.retry_delay),
            messages_per_second=data.get(
                "messages_per_second", defaults.messages_per_second
            ),
            message_sleep=data.get("message_sleep", defaults.message_sleep),
            settle_sleep=data.get("settle_sleep", defaults.settle_sleep),
            team_poll_interval=data.get(
                "team_poll_interval", defaults.team_poll_interval
            ),
        )


def load_config(config_path: Path) -> MigrationConfig:
    """
    Load configuration from YAML file and apply default values.

    A missing or unreadable file falls back to defaults with a warning. A file
    whose contents are structurally wrong raises ``ConfigError``, since the
    mappings decide which destination teams get wiped and recreated.

    Args:
        config_path: Path to the config YAML file

    Returns:
        MigrationConfig with all necessary defaults applied
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)
                # Handle None result from empty file
                if loaded_config is not None:
                    raw = loaded_config
            log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
        except (yaml.YAMLError, OSError) as e:
            log_with_context(
                logging.WARNING, f"Failed to load config file {config_path}: {e}"
            )
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    return MigrationConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file with example mappings.

    The function will not overwrite an existing configuration file.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        "team_mapping": {
            "Engineering": ["eng-", "backend", "frontend"],
            "Company": ["general", "announcements"],
        },
        "member_mapping": {
            "Engineering": ["lead@example.com", "dev@example.com"],
            "Company": ["admin@example.com"],
        },
        "skip_channels": ["random"],
        "cleanup_staging": True,
        "strip_channel_prefix": True,
        "fallback_member_email": "admin@example.com",
        "team_description": DEFAULT_TEAM_DESCRIPTION,
        "retry_budget": RETRY_BUDGET,
        "retry_delay": 0,
        "messages_per_second": MESSAGES_PER_SECOND,
        "message_sleep": MESSAGE_SLEEP,
        "settle_sleep": SETTLE_SLEEP,
    }

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False
