"""Immutable migration context.

MigrationContext is a frozen dataclass that holds the configuration and
paths for one run. It is created once by the CLI and shared (read-only) with
every component that needs configuration or paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from space_migrator.constants import STAGING_MANIFEST_FILE
from space_migrator.core.config import MigrationConfig


@dataclass(frozen=True)
class MigrationContext:
    """Immutable context for a migration run. Created once, shared everywhere."""

    # Paths
    staging_root: Path
    output_dir: str | None

    # Loaded configuration
    config: MigrationConfig

    # Mode flags
    verbose: bool = False
    debug_api: bool = False

    @property
    def manifest_file(self) -> Path:
        """Path to the staging manifest."""
        return self.staging_root / STAGING_MANIFEST_FILE
