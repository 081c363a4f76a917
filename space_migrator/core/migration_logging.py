"""
Migration success/failure logging for the Space to Teams migration tool.

Kept out of ``migrator.py`` so the orchestrator stays focused on control flow.
Each function takes a ``migrator`` instance as its first argument.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from space_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from space_migrator.core.migrator import TeamsMigrator


def _collect_statistics(migrator: TeamsMigrator) -> dict[str, Any]:
    """Gather run statistics from migrator state into a flat dict.

    Args:
        migrator: The migrator instance whose state contains run statistics.

    Returns:
        Dict with keys: teams_created, channels_created, channels_patched,
        messages_imported, messages_skipped, messages_failed,
        messages_requeued, members_added, unresolved_authors.
    """
    summary = migrator.state.summary
    unresolved = 0
    if migrator.user_resolver is not None:
        unresolved = sum(migrator.user_resolver.unresolved_authors.values())

    return {
        "teams_created": len(summary["teams_created"]),
        "channels_created": summary["channels_created"],
        "channels_patched": summary["channels_patched"],
        "messages_imported": summary["messages_imported"],
        "messages_skipped": summary["messages_skipped"],
        "messages_failed": summary["messages_failed"],
        "messages_requeued": summary["messages_requeued"],
        "members_added": summary["members_added"],
        "unresolved_authors": unresolved,
    }


def log_migration_success(migrator: TeamsMigrator, duration: float) -> None:
    """Log the final migration status with a summary of the run.

    Args:
        migrator: The migrator instance whose state contains run statistics.
        duration: Migration duration in seconds.
    """
    stats = _collect_statistics(migrator)
    duration_minutes = duration / 60

    if stats["teams_created"] == 0:
        log_with_context(
            logging.WARNING,
            "MIGRATION FINISHED WITHOUT CREATING ANY TEAM",
            outcome="no_work",
        )
    else:
        log_with_context(
            logging.INFO,
            "SPACE-TO-TEAMS MIGRATION COMPLETED SUCCESSFULLY",
            outcome="success",
        )

    log_with_context(
        logging.INFO,
        f"Duration: {duration_minutes:.1f} minutes ({duration:.1f} seconds)",
        duration_seconds=duration,
    )
    for stat in (
        "teams_created",
        "channels_created",
        "channels_patched",
        "messages_imported",
        "messages_skipped",
        "messages_requeued",
        "members_added",
    ):
        label = stat.replace("_", " ").capitalize()
        log_with_context(
            logging.INFO, f"{label}: {stats[stat]}", stat=stat, count=stats[stat]
        )

    if stats["unresolved_authors"] > 0:
        log_with_context(
            logging.WARNING,
            f"Messages skipped for unresolved authors: {stats['unresolved_authors']}",
            stat="unresolved_authors",
            count=stats["unresolved_authors"],
        )
        for name, count in sorted(migrator.user_resolver.unresolved_authors.items()):
            log_with_context(logging.WARNING, f'  "{name}": {count}', author=name)
    else:
        log_with_context(logging.INFO, "No issues detected")


def log_migration_failure(
    migrator: TeamsMigrator, exception: BaseException, duration: float
) -> None:
    """Log the final failure status with error details and progress made.

    Args:
        migrator: The migrator instance whose state contains run statistics.
        exception: The exception that caused the failure.
        duration: Migration duration in seconds before failure.
    """
    duration_minutes = duration / 60
    is_interrupt = isinstance(exception, KeyboardInterrupt)
    state = migrator.state

    if is_interrupt:
        log_with_context(
            logging.WARNING,
            "SPACE-TO-TEAMS MIGRATION INTERRUPTED BY USER",
            outcome="interrupted",
            exception_type="KeyboardInterrupt",
        )
    else:
        log_with_context(
            logging.ERROR,
            "SPACE-TO-TEAMS MIGRATION FAILED",
            outcome="failed",
            exception_type=type(exception).__name__,
            exception_message=str(exception),
        )
        log_with_context(
            logging.ERROR,
            f"Exception: {type(exception).__name__}: {exception!s}",
            team=state.current_team,
        )

    log_with_context(
        logging.WARNING if is_interrupt else logging.ERROR,
        f"Duration before stopping:"
        f" {duration_minutes:.1f} minutes ({duration:.1f} seconds)",
        duration_seconds=duration,
    )

    stats = _collect_statistics(migrator)
    progress_level = logging.WARNING if is_interrupt else logging.ERROR
    log_with_context(
        progress_level,
        f"PROGRESS BEFORE STOPPING: Teams created: {stats['teams_created']}, "
        f"messages imported: {stats['messages_imported']}",
        stat="progress",
    )
    if state.current_team:
        log_with_context(
            progress_level,
            f'Stopped while processing team "{state.current_team}"'
            + (f', channel "{state.current_channel}"' if state.current_channel else ""),
        )
    log_with_context(
        logging.INFO,
        "Re-running the import removes the partially migrated teams first.",
    )
