"""Local staging store shared by export and import.

Layout under the staging root::

    manifest.json              {"schema_version": 1, "exported_at": "..."}
    <channelId>/channel.json   the channel record
    <channelId>/messages.json  all messages, oldest first

Export and import only meet through this layout, so either side can be run,
replaced, or tested on its own.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from space_migrator.constants import (
    CHANNEL_FILE,
    MESSAGES_FILE,
    STAGING_MANIFEST_FILE,
    STAGING_SCHEMA_VERSION,
)
from space_migrator.exceptions import StagingError
from space_migrator.types import ChannelRecord, MessageRecord
from space_migrator.utils.logging import log_with_context


def to_json(data: Any) -> str:
    """Pretty-print JSON the way staged files are stored."""
    return json.dumps(data, indent=4, ensure_ascii=False) + "\n"


def _write_atomic(path: Path, content: str) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(content, encoding="utf-8")
    tmp.replace(path)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StagingError(f"Failed to read staged file {path}: {e}") from e


class StagingStore:
    """Per-channel durable record of channel metadata and ordered messages."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    # -- Whole store ----------------------------------------------------------

    def wipe(self) -> None:
        """Recursively remove the staging root."""
        if self.root.is_dir():
            log_with_context(logging.INFO, f"Cleanup directory {self.root}")
            shutil.rmtree(self.root)

    def write_manifest(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        manifest = {
            "schema_version": STAGING_SCHEMA_VERSION,
            "exported_at": datetime.now(timezone.utc).isoformat(),
        }
        _write_atomic(self.root / STAGING_MANIFEST_FILE, to_json(manifest))

    def check_manifest(self) -> None:
        """Verify the staging root exists and was written by a compatible export.

        A missing manifest is tolerated with a warning; a manifest with a
        different schema version is rejected.

        Raises:
            StagingError: The root is missing or the schema version differs.
        """
        if not self.root.is_dir():
            raise StagingError(f"Staging directory {self.root} does not exist")

        manifest_path = self.root / STAGING_MANIFEST_FILE
        if not manifest_path.exists():
            log_with_context(
                logging.WARNING,
                f"No {STAGING_MANIFEST_FILE} in {self.root}, assuming schema version "
                f"{STAGING_SCHEMA_VERSION}",
            )
            return

        manifest = _read_json(manifest_path)
        version = manifest.get("schema_version") if isinstance(manifest, dict) else None
        if version != STAGING_SCHEMA_VERSION:
            raise StagingError(
                f"Staging schema version {version} != {STAGING_SCHEMA_VERSION}; "
                "re-run the export"
            )

    # -- Channels -------------------------------------------------------------

    def channel_dir(self, channel_id: str) -> Path:
        return self.root / channel_id

    def create_channel_slot(self, channel: ChannelRecord) -> Path:
        """Create the channel directory and write ``channel.json`` right away."""
        channel_dir = self.channel_dir(channel["channelId"])
        channel_dir.mkdir(parents=True, exist_ok=True)
        _write_atomic(channel_dir / CHANNEL_FILE, to_json(channel))
        return channel_dir

    def write_messages(self, channel_id: str, messages: list[MessageRecord]) -> None:
        """Write the complete ordered message list of a channel in one go."""
        channel_dir = self.channel_dir(channel_id)
        channel_dir.mkdir(parents=True, exist_ok=True)
        _write_atomic(channel_dir / MESSAGES_FILE, to_json(messages))

    def channel_ids(self) -> list[str]:
        """Ids of all staged channels, in directory-name order."""
        if not self.root.is_dir():
            return []
        return sorted(
            d.name
            for d in self.root.iterdir()
            if d.is_dir() and (d / CHANNEL_FILE).exists()
        )

    def load_channel(self, channel_id: str) -> ChannelRecord:
        data = _read_json(self.channel_dir(channel_id) / CHANNEL_FILE)
        if not isinstance(data, dict) or "name" not in data:
            raise StagingError(f"Invalid channel record for {channel_id}")
        record: ChannelRecord = data  # type: ignore[assignment]
        return record

    def load_messages(self, channel_id: str) -> list[MessageRecord]:
        """Load a channel's messages; a channel without ``messages.json`` has none."""
        path = self.channel_dir(channel_id) / MESSAGES_FILE
        if not path.exists():
            log_with_context(
                logging.WARNING, f"No {MESSAGES_FILE} staged for channel {channel_id}"
            )
            return []
        data = _read_json(path)
        if not isinstance(data, list):
            raise StagingError(f"Invalid message list for {channel_id}")
        return data

    def iter_channels(self) -> Iterator[ChannelRecord]:
        for channel_id in self.channel_ids():
            yield self.load_channel(channel_id)
