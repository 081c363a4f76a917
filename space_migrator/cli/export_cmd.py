"""CLI command handler for exporting Space channels into the staging directory."""

from __future__ import annotations

import logging
import sys

import click

from space_migrator.cli.common import (
    cli,
    common_options,
    handle_exception,
    prepare_run,
    space_options,
)
from space_migrator.constants import EXIT_FATAL
from space_migrator.core.context import MigrationContext
from space_migrator.core.exporter import Exporter
from space_migrator.core.staging import StagingStore
from space_migrator.services.space_adapter import SpaceAdapter
from space_migrator.utils.api import get_space_client
from space_migrator.utils.logging import log_with_context


def run_export(
    mctx: MigrationContext,
    space_url: str,
    space_client_id: str,
    space_client_secret: str,
    skip: tuple[str, ...] = (),
    keep_staging: bool = False,
) -> int:
    """Export every Space channel into ``mctx.staging_root``.

    Returns:
        Number of exported messages.
    """
    space = SpaceAdapter(get_space_client(space_url, space_client_id, space_client_secret))
    exporter = Exporter(space, StagingStore(mctx.staging_root), mctx.config)
    for name in skip:
        exporter.skip_channel(name)
    if keep_staging:
        exporter.set_cleanup(False)

    log_with_context(logging.INFO, f"Export Space channels from {space_url}")
    return exporter.export()


# ---------------------------------------------------------------------------
# export subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@space_options
@click.option(
    "--skip",
    multiple=True,
    help="Channel name to leave out of the export (repeatable)",
)
@click.option(
    "--keep_staging",
    is_flag=True,
    default=False,
    help="Do not wipe the staging directory before exporting",
)
def export(
    config: str,
    staging_dir: str,
    verbose: bool,
    debug_api: bool,
    space_url: str,
    space_client_id: str,
    space_client_secret: str,
    skip: tuple[str, ...],
    keep_staging: bool,
) -> None:
    """Export JetBrains Space channels and messages to the staging directory.

    Args:
        config: Path to config YAML.
        staging_dir: Directory to write the staged data to.
        verbose: Enable verbose console logging.
        debug_api: Enable detailed API request/response logging.
        space_url: Base URL of the Space organization.
        space_client_id: Space application client id.
        space_client_secret: Space application client secret.
        skip: Channel names to leave out.
        keep_staging: Do not wipe the staging directory first.
    """
    try:
        mctx = prepare_run(config, staging_dir, verbose, debug_api)
        run_export(
            mctx, space_url, space_client_id, space_client_secret, skip, keep_staging
        )
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(EXIT_FATAL)
