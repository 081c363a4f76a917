"""CLI command handler for writing an example configuration file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from space_migrator.cli.common import cli
from space_migrator.core.config import create_default_config
from space_migrator.utils.logging import setup_logger


@cli.command("init-config")
@click.option(
    "--output",
    default="config.yaml",
    show_default=True,
    help="Where to write the example config",
)
def init_config(output: str) -> None:
    """Write an example config.yaml with team and member mappings.

    An existing file is never overwritten.
    """
    setup_logger()
    if not create_default_config(Path(output)):
        sys.exit(1)
    click.echo(f"Example configuration written to {output}")
