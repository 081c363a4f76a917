"""
Export of Space channels and messages into the local staging store.

Export is read-only towards Space and never retried: a failing Space call
raises ``ExportError`` and ends the run. Re-running the export with
``cleanup_staging`` enabled starts again from an empty staging root.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from space_migrator.core.config import MigrationConfig
from space_migrator.core.staging import StagingStore
from space_migrator.exceptions import ExportError
from space_migrator.services.space_adapter import SpaceAdapter
from space_migrator.types import ChannelRecord, MessageRecord
from space_migrator.utils.api import http_error_details
from space_migrator.utils.formatting import estimate_import_duration, format_number
from space_migrator.utils.logging import log_with_context


class Exporter:
    """Walks Space channels and writes one staging record per channel."""

    def __init__(
        self,
        space: SpaceAdapter,
        store: StagingStore,
        config: MigrationConfig,
    ) -> None:
        self.space = space
        self.store = store
        self.config = config
        self.cleanup = config.cleanup_staging
        self.skip_channels: set[str] = set(config.skip_channels)
        self.total_messages = 0

    def skip_channel(self, channel_name: str) -> None:
        """Exclude a channel from export."""
        self.skip_channels.add(channel_name)

    def do_not_skip_channel(self, channel_name: str) -> None:
        """Re-include a previously skipped channel."""
        self.skip_channels.discard(channel_name)

    def set_cleanup(self, cleanup: bool) -> None:
        self.cleanup = cleanup

    def export(self) -> int:
        """Export every non-archived channel that is not skipped.

        Returns:
            Total number of exported messages.

        Raises:
            ExportError: A Space call failed.
        """
        if self.cleanup:
            log_with_context(logging.INFO, "Cleanup directories")
            self.store.wipe()

        channels = self._call("list channels", self.space.list_channels)
        log_with_context(logging.INFO, f"Found {len(channels)} channels in Space")

        self.store.write_manifest()
        self.total_messages = 0

        for channel in channels:
            self.export_channel(channel)

        log_with_context(logging.INFO, "")
        log_with_context(logging.INFO, "--------------------------------")
        log_with_context(logging.INFO, "")
        log_with_context(
            logging.INFO,
            f"Total messages exported: {format_number(self.total_messages)}",
        )
        log_with_context(
            logging.INFO,
            "Import the messages into Microsoft Teams will take "
            + estimate_import_duration(
                self.total_messages,
                self.config.messages_per_second,
                self.config.message_sleep,
            ),
        )
        return self.total_messages

    def export_channel(self, channel: ChannelRecord) -> int:
        """Stage one channel: metadata first, then all messages in one write.

        Returns:
            Number of messages staged (0 when the channel is skipped).
        """
        name = channel.get("name", "")
        if name in self.skip_channels:
            log_with_context(logging.INFO, f'Skipping channel "{name}"')
            return 0

        self.store.create_channel_slot(channel)

        log_with_context(
            logging.INFO,
            f"Adding {format_number(channel.get('totalMessages', 0))} messages "
            f'from channel "{name}"',
        )
        messages = self.fetch_messages(channel)
        self.store.write_messages(channel["channelId"], messages)

        log_with_context(logging.INFO, f"Added {format_number(len(messages))} messages.")
        self.total_messages += len(messages)
        return len(messages)

    def fetch_messages(self, channel: ChannelRecord) -> list[MessageRecord]:
        """Page through a channel's messages, oldest first.

        Stops when a page comes back short of the batch size or Space reports
        that the organization pagination limit was reached.
        """
        batch_size = self.config.batch_size
        messages: list[MessageRecord] = []
        start_from: str | None = None

        while True:
            page = self._call(
                f"fetch messages of {channel.get('name')}",
                self.space.get_channel_messages,
                channel["channelId"],
                start_from_date=start_from,
                batch_size=batch_size,
            )
            batch = page.get("messages") or []
            messages.extend(batch)

            if page.get("orgLimitReached"):
                log_with_context(
                    logging.WARNING,
                    f"Organization pagination limit reached in channel "
                    f"\"{channel.get('name')}\", export of this channel is incomplete",
                )
                return messages
            if len(batch) < batch_size:
                return messages

            next_start = page.get("nextStartFromDate") or {}
            start_from = next_start.get("iso")
            if not start_from:
                return messages

    def _call(self, operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except requests.HTTPError as e:
            status, reason, message = http_error_details(e)
            raise ExportError(
                f"Space request to {operation} failed with status {status} "
                f"({reason}): {message}"
            ) from e
        except requests.RequestException as e:
            raise ExportError(f"Space request to {operation} failed: {e}") from e
