"""Custom exception hierarchy for the Space to Teams migration tool."""


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration is invalid or missing."""


class ExportError(MigratorError):
    """Raised when reading channels or messages from Space fails."""


class StagingError(MigratorError):
    """Raised when the local staging directory is missing or unreadable."""


class RetryBudgetExhaustedError(MigratorError):
    """Raised when the shared retry budget drops below zero."""

    def __init__(self, operation: str, limit: int) -> None:
        super().__init__(
            f"Out of tries! Retry budget of {limit} exhausted in {operation}"
        )
        self.operation = operation
        self.limit = limit


class UnclassifiedRemoteError(MigratorError):
    """Raised when a remote call fails without an HTTP status (transport faults)."""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"Something went wrong in {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class TeamCreationError(MigratorError):
    """Raised when a team cannot be created or never becomes visible."""


class ChannelCreationError(MigratorError):
    """Raised when a channel cannot be created or located in its team."""
