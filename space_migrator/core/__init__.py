"""Core migration logic including configuration, staging, and orchestration."""

__all__ = [
    "channel_processor",
    "config",
    "context",
    "exporter",
    "mapping",
    "migration_logging",
    "migrator",
    "retry",
    "staging",
    "state",
    "timestamps",
]
