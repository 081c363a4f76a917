"""CLI command handler for importing staged data into Microsoft Teams."""

from __future__ import annotations

import logging
import sys

import yaml

from space_migrator.cli.common import (
    cli,
    common_options,
    graph_options,
    handle_exception,
    prepare_run,
)
from space_migrator.cli.report import generate_report
from space_migrator.constants import EXIT_FATAL
from space_migrator.core.context import MigrationContext
from space_migrator.core.mapping import MappingResolver
from space_migrator.core.migrator import TeamsMigrator
from space_migrator.core.staging import StagingStore
from space_migrator.services.teams_adapter import TeamsAdapter
from space_migrator.utils.api import get_graph_client
from space_migrator.utils.logging import log_with_context


def run_import(
    mctx: MigrationContext,
    tenant_id: str,
    ms_client_id: str,
    ms_client_secret: str,
    exported_messages: int | None = None,
) -> TeamsMigrator:
    """Import the staged channels into Teams and write the run report.

    The report is written even when the import fails, so it shows the
    progress made before the failure.
    """
    store = StagingStore(mctx.staging_root)
    store.check_manifest()

    teams = TeamsAdapter(get_graph_client(tenant_id, ms_client_id, ms_client_secret))
    migrator = TeamsMigrator(mctx, teams, MappingResolver(store, mctx.config))

    try:
        migrator.migrate()
    finally:
        try:
            generate_report(
                mctx, migrator.state, migrator.user_resolver, exported_messages
            )
        except (OSError, yaml.YAMLError) as report_error:
            log_with_context(
                logging.WARNING,
                f"Failed to generate migration report: {report_error}",
            )
    return migrator


# ---------------------------------------------------------------------------
# import subcommand
# ---------------------------------------------------------------------------


@cli.command("import")
@common_options
@graph_options
def import_cmd(
    config: str,
    staging_dir: str,
    verbose: bool,
    debug_api: bool,
    tenant_id: str,
    ms_client_id: str,
    ms_client_secret: str,
) -> None:
    """Import the staging directory into Microsoft Teams.

    Existing teams named like a mapped team are deleted first.

    Args:
        config: Path to config YAML.
        staging_dir: Directory holding the staged data.
        verbose: Enable verbose console logging.
        debug_api: Enable detailed API request/response logging.
        tenant_id: Microsoft Entra tenant id.
        ms_client_id: App registration client id.
        ms_client_secret: App registration client secret.
    """
    try:
        mctx = prepare_run(config, staging_dir, verbose, debug_api)
        run_import(mctx, tenant_id, ms_client_id, ms_client_secret)
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(EXIT_FATAL)
