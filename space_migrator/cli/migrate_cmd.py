"""CLI command handler for the full export-then-import workflow."""

from __future__ import annotations

import logging
import sys

import click

from space_migrator.cli.common import (
    cli,
    common_options,
    graph_options,
    handle_exception,
    prepare_run,
    space_options,
)
from space_migrator.cli.export_cmd import run_export
from space_migrator.cli.import_cmd import run_import
from space_migrator.constants import EXIT_FATAL
from space_migrator.utils.logging import log_with_context

# ---------------------------------------------------------------------------
# migrate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@space_options
@graph_options
@click.option(
    "--skip",
    multiple=True,
    help="Channel name to leave out of the export (repeatable)",
)
def migrate(
    config: str,
    staging_dir: str,
    verbose: bool,
    debug_api: bool,
    space_url: str,
    space_client_id: str,
    space_client_secret: str,
    tenant_id: str,
    ms_client_id: str,
    ms_client_secret: str,
    skip: tuple[str, ...],
) -> None:
    """Run the full Space-to-Teams migration: export, then import.

    Args:
        config: Path to config YAML.
        staging_dir: Directory used for the staged data.
        verbose: Enable verbose console logging.
        debug_api: Enable detailed API request/response logging.
        space_url: Base URL of the Space organization.
        space_client_id: Space application client id.
        space_client_secret: Space application client secret.
        tenant_id: Microsoft Entra tenant id.
        ms_client_id: App registration client id.
        ms_client_secret: App registration client secret.
        skip: Channel names to leave out of the export.
    """
    try:
        mctx = prepare_run(config, staging_dir, verbose, debug_api)

        log_with_context(logging.INFO, "STEP 1/2: Export")
        exported = run_export(
            mctx, space_url, space_client_id, space_client_secret, skip
        )

        log_with_context(logging.INFO, "")
        log_with_context(logging.INFO, "STEP 2/2: Import")
        run_import(mctx, tenant_id, ms_client_id, ms_client_secret, exported)
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(EXIT_FATAL)
