"""Unit tests for MigrationContext."""

import dataclasses
from pathlib import Path

import pytest

from space_migrator.core.config import MigrationConfig
from space_migrator.core.context import MigrationContext


def _make_ctx(**overrides) -> MigrationContext:
    defaults = {
        "staging_root": Path("/tmp/staging"),
        "output_dir": "/tmp/out",
        "config": MigrationConfig(),
    }
    defaults.update(overrides)
    return MigrationContext(**defaults)


class TestMigrationContext:
    """Tests for the immutable run context."""

    def test_defaults(self):
        ctx = _make_ctx()
        assert ctx.verbose is False
        assert ctx.debug_api is False

    def test_is_frozen(self):
        ctx = _make_ctx()
        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.verbose = True  # type: ignore[misc]

    def test_manifest_file(self):
        ctx = _make_ctx()
        assert ctx.manifest_file == Path("/tmp/staging/manifest.json")

    def test_replace_creates_new_instance(self):
        ctx = _make_ctx()
        verbose = dataclasses.replace(ctx, verbose=True)

        assert verbose.verbose is True
        assert ctx.verbose is False
        assert verbose.config is ctx.config
