#!/usr/bin/env python3
"""
Main execution module for the Space to Teams migration tool.

Importing the ``*_cmd`` modules registers their subcommands on the shared
click group defined in ``common``.
"""

from __future__ import annotations

from dotenv import load_dotenv

import space_migrator.cli.export_cmd  # noqa: F401
import space_migrator.cli.import_cmd  # noqa: F401
import space_migrator.cli.init_config_cmd  # noqa: F401
import space_migrator.cli.migrate_cmd  # noqa: F401
from space_migrator.cli.common import cli


def main() -> None:
    """Entry point for ``space-migrator``.

    Credentials are read from the environment; a ``.env`` file in the
    working directory is loaded first without overriding variables that are
    already set.
    """
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
