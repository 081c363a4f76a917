"""
Report generation for the Space to Teams migration.
"""

from __future__ import annotations

import datetime
import logging
import os
from typing import Any

import yaml

from space_migrator.core.context import MigrationContext
from space_migrator.core.state import RunState
from space_migrator.services.user_resolver import UserResolver
from space_migrator.utils.logging import log_with_context

REPORT_FILE = "migration_report.yaml"


def create_output_directory(base_dir: str = "migration_logs") -> str:
    """Create a timestamped output directory for this run.

    Returns:
        The path to the newly created output directory.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = os.path.join(base_dir, f"run_{timestamp}")

    os.makedirs(output_dir, exist_ok=True)
    os.makedirs(os.path.join(output_dir, "channel_logs"), exist_ok=True)

    return output_dir


def build_report(
    ctx: MigrationContext,
    state: RunState,
    user_resolver: UserResolver | None = None,
    exported_messages: int | None = None,
) -> dict[str, Any]:
    """Assemble the report dictionary from the run state."""
    summary = state.summary
    report: dict[str, Any] = {
        "migration_summary": {
            "timestamp": datetime.datetime.now().isoformat(),
            "staging_path": str(ctx.staging_root),
            "output_path": str(ctx.output_dir or "."),
            "teams_created": len(summary["teams_created"]),
            "channels_created": summary["channels_created"],
            "channels_patched": summary["channels_patched"],
            "messages_imported": summary["messages_imported"],
            "messages_skipped": summary["messages_skipped"],
            "messages_failed": summary["messages_failed"],
            "messages_requeued": summary["messages_requeued"],
            "members_added": summary["members_added"],
        },
        "teams": list(summary["teams_created"]),
        "unresolved_authors": {},
        "recommendations": [],
    }
    if exported_messages is not None:
        report["migration_summary"]["messages_exported"] = exported_messages

    if state.current_team:
        report["stopped_at"] = {
            "team": state.current_team,
            "channel": state.current_channel,
        }

    if user_resolver is not None and user_resolver.unresolved_authors:
        report["unresolved_authors"] = dict(sorted(user_resolver.unresolved_authors.items()))
        report["recommendations"].append(
            {
                "type": "unresolved_authors",
                "message": f"Messages from {len(user_resolver.unresolved_authors)} authors "
                "were skipped. Make sure their emails exist in the directory, or set "
                "fallback_member_email for deleted users.",
                "severity": "warning",
            }
        )

    if summary["messages_requeued"]:
        report["recommendations"].append(
            {
                "type": "requeued_messages",
                "message": f"{summary['messages_requeued']} message submissions were "
                "requeued. Consider lowering messages_per_second in config.yaml.",
                "severity": "info",
            }
        )

    return report


def generate_report(
    ctx: MigrationContext,
    state: RunState,
    user_resolver: UserResolver | None = None,
    exported_messages: int | None = None,
    output_file: str = REPORT_FILE,
) -> str:
    """Write the migration report as YAML into the run's output directory.

    Returns:
        Path of the written report.
    """
    report = build_report(ctx, state, user_resolver, exported_messages)
    report_path = os.path.join(ctx.output_dir or ".", output_file)

    with open(report_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(report, f, default_flow_style=False, sort_keys=False)

    log_with_context(logging.INFO, f"Migration report generated: {report_path}")
    return report_path
