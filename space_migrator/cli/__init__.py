"""Command-line interface: click group, subcommands and run report."""

__all__ = [
    "commands",
    "common",
    "export_cmd",
    "import_cmd",
    "init_config_cmd",
    "migrate_cmd",
    "report",
]
