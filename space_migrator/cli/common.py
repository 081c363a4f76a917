"""Shared CLI infrastructure: option decorators, error handlers, and the CLI group."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, ClassVar

import click
import requests

import space_migrator
from space_migrator.cli.report import create_output_directory
from space_migrator.constants import HTTP_RATE_LIMIT, HTTP_SERVER_ERROR_MIN
from space_migrator.core.config import load_config
from space_migrator.core.context import MigrationContext
from space_migrator.exceptions import (
    MigratorError,
    RetryBudgetExhaustedError,
    UnclassifiedRemoteError,
)
from space_migrator.utils.api import http_error_details
from space_migrator.utils.logging import log_with_context, setup_logger


# ---------------------------------------------------------------------------
# Custom click.Group that defaults to ``migrate``.
# When the first CLI token starts with ``-`` (i.e. a flag, not a subcommand)
# the group silently prepends ``migrate`` so that
#   ``space-migrator --config config.yaml``
# runs the full export and import.
# ---------------------------------------------------------------------------


class DefaultGroup(click.Group):
    """Click group that defaults to the ``migrate`` subcommand."""

    # Flags that belong to the group itself and should NOT trigger the
    # ``migrate`` default.
    _GROUP_FLAGS: ClassVar[set[str]] = {"--help", "--version", "-h"}

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Prepend ``migrate`` when the first token is a flag.

        Args:
            ctx: The current Click context.
            args: Raw CLI argument list.

        Returns:
            The (possibly modified) argument list for further parsing.
        """
        if args and args[0].startswith("-") and args[0] not in self._GROUP_FLAGS:
            args = ["migrate", *args]
        return super().parse_args(ctx, args)


# ---------------------------------------------------------------------------
# Shared option decorators
# ---------------------------------------------------------------------------


def common_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds options shared across the migration subcommands.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with common options attached.
    """
    f = click.option(
        "--config",
        default="config.yaml",
        show_default=True,
        help="Path to config YAML",
    )(f)
    f = click.option(
        "--staging_dir",
        default="staging",
        show_default=True,
        envvar="STAGING_DIR",
        help="Directory holding the exported Space data",
    )(f)
    f = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose console logging (shows DEBUG level messages)",
    )(f)
    f = click.option(
        "--debug_api",
        is_flag=True,
        default=False,
        help="Enable detailed API request/response logging (creates very large log files)",
    )(f)
    return f


def space_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds JetBrains Space credentials (read from the environment)."""
    f = click.option(
        "--space_url",
        envvar="SPACE_URL",
        required=True,
        help="Base URL of the Space organization [env: SPACE_URL]",
    )(f)
    f = click.option(
        "--space_client_id",
        envvar="SPACE_CLIENT_ID",
        required=True,
        help="Space application client id [env: SPACE_CLIENT_ID]",
    )(f)
    f = click.option(
        "--space_client_secret",
        envvar="SPACE_CLIENT_SECRET",
        required=True,
        help="Space application client secret [env: SPACE_CLIENT_SECRET]",
    )(f)
    return f


def graph_options(f: Callable[..., None]) -> Callable[..., None]:
    """Decorator that adds Microsoft Graph credentials (read from the environment)."""
    f = click.option(
        "--tenant_id",
        envvar="TENANT_ID",
        required=True,
        help="Microsoft Entra tenant id [env: TENANT_ID]",
    )(f)
    f = click.option(
        "--ms_client_id",
        envvar="MS_CLIENT_ID",
        required=True,
        help="App registration client id [env: MS_CLIENT_ID]",
    )(f)
    f = click.option(
        "--ms_client_secret",
        envvar="MS_CLIENT_SECRET",
        required=True,
        help="App registration client secret [env: MS_CLIENT_SECRET]",
    )(f)
    return f


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(
    cls=DefaultGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=space_migrator.__version__, prog_name="space-migrator")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """JetBrains Space to Microsoft Teams migration tool.

    Args:
        ctx: The Click context (injected by ``@click.pass_context``).
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def prepare_run(
    config: str, staging_dir: str, verbose: bool, debug_api: bool
) -> MigrationContext:
    """Create the run's output directory, set up logging and load the config.

    Raises:
        ConfigError: The config file is structurally invalid.
    """
    output_dir = create_output_directory()
    setup_logger(verbose, debug_api, output_dir)
    log_with_context(logging.INFO, f"Output directory: {output_dir}")

    config_path = Path(config)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config
    log_with_context(logging.INFO, "Starting with the following parameters:")
    log_with_context(logging.INFO, f"- Config: {config_path}")
    log_with_context(logging.INFO, f"- Staging directory: {staging_dir}")
    log_with_context(logging.INFO, f"- Verbose logging: {verbose}")
    log_with_context(logging.INFO, f"- Debug API calls: {debug_api}")

    return MigrationContext(
        staging_root=Path(staging_dir),
        output_dir=output_dir,
        config=load_config(config_path),
        verbose=verbose,
        debug_api=debug_api,
    )


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def handle_http_error(e: requests.HTTPError) -> None:
    """Handle HTTP errors with specific messages.

    Args:
        e: The HTTP error that escaped the migration.
    """
    status, reason, message = http_error_details(e)

    if status in (401, 403):
        log_with_context(logging.ERROR, f"Permission denied ({status} {reason}): {message}")
        log_with_context(
            logging.INFO,
            "\nThe application registration may lack permissions. Please ensure:",
        )
        log_with_context(
            logging.INFO,
            "1. Teamwork.Migrate.All, Group.ReadWrite.All, User.Read.All,"
            " Channel.Delete.All and TeamMember.ReadWrite.All are granted",
        )
        log_with_context(logging.INFO, "2. Admin consent was given for the tenant")
        log_with_context(
            logging.INFO,
            "3. The Space application has rights to read channels and messages",
        )
    elif status == HTTP_RATE_LIMIT:
        log_with_context(logging.ERROR, f"Rate limit exceeded: {message}")
        log_with_context(
            logging.INFO,
            "The migration hit API rate limits. Lower messages_per_second in config.yaml.",
        )
    elif status is not None and status >= HTTP_SERVER_ERROR_MIN:
        log_with_context(logging.ERROR, f"Server error ({status} {reason}): {message}")
        log_with_context(
            logging.INFO, "This is likely a temporary issue. Please try again later."
        )
    else:
        log_with_context(logging.ERROR, f"API error during migration: {message}")


def handle_exception(e: BaseException) -> None:
    """Handle different types of exceptions.

    Args:
        e: The exception to handle.
    """
    if isinstance(e, RetryBudgetExhaustedError):
        log_with_context(logging.ERROR, str(e))
        log_with_context(
            logging.INFO,
            "Check the migration log for the status codes returned by the API.",
        )
    elif isinstance(e, UnclassifiedRemoteError):
        log_with_context(logging.ERROR, str(e))
        log_with_context(
            logging.INFO, "Check your network connection and the service URLs."
        )
    elif isinstance(e, MigratorError):
        log_with_context(logging.ERROR, str(e))
    elif isinstance(e, requests.HTTPError):
        handle_http_error(e)
    elif isinstance(e, FileNotFoundError):
        log_with_context(logging.ERROR, f"File not found: {e}")
        log_with_context(
            logging.INFO,
            "Please check that all required files exist and paths are correct.",
        )
    elif isinstance(e, KeyboardInterrupt):
        log_with_context(logging.WARNING, "Migration interrupted by user.")
        log_with_context(
            logging.INFO,
            "Re-running the import removes the partially migrated teams first.",
        )
    else:
        log_with_context(logging.ERROR, f"Migration failed: {e}", exc_info=True)
