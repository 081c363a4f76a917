"""
Run state container for the Space to Teams migration.

Mutable tracking state for one import run, separated from immutable
configuration (MigrationContext) for clear ownership boundaries. A single
RunState belongs to one TeamsMigrator and is passed explicitly to every
component that needs it; nothing here is safe to share between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from space_migrator.constants import RETRY_BUDGET
from space_migrator.core.retry import RetryBudget
from space_migrator.core.timestamps import TimestampDeduplicator
from space_migrator.types import MessageRecord, MigrationSummary


def _default_migration_summary() -> MigrationSummary:
    """Return a fresh MigrationSummary with zeroed counters."""
    return MigrationSummary(
        teams_created=[],
        channels_created=0,
        channels_patched=0,
        messages_imported=0,
        messages_skipped=0,
        messages_failed=0,
        messages_requeued=0,
        members_added=0,
    )


@dataclass
class RunState:
    """Holds all mutable tracking state for a migration run.

    - ``retry_budget``: shared attempt countdown, refilled on every success
    - ``timestamps``: run-wide set of used destination seconds
    - ``failed_messages``: index -> staged message for the channel in progress
    - ``summary``: counters reported at the end of the run
    """

    retry_budget: RetryBudget = field(default_factory=lambda: RetryBudget(RETRY_BUDGET))
    timestamps: TimestampDeduplicator = field(default_factory=TimestampDeduplicator)
    failed_messages: dict[int, MessageRecord] = field(default_factory=dict)
    summary: MigrationSummary = field(default_factory=_default_migration_summary)
    current_team: str | None = None
    current_channel: str | None = None

    @classmethod
    def for_budget(cls, retry_budget: int) -> RunState:
        return cls(retry_budget=RetryBudget(retry_budget))

    def start_channel(self, channel: str) -> None:
        """Reset per-channel state before importing a channel."""
        self.current_channel = channel
        self.failed_messages = {}

    @property
    def has_failed_messages(self) -> bool:
        return bool(self.failed_messages)
