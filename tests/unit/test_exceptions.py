"""Unit tests for the exception hierarchy."""

import pytest
import requests

from space_migrator.exceptions import (
    ChannelCreationError,
    ConfigError,
    ExportError,
    MigratorError,
    RetryBudgetExhaustedError,
    StagingError,
    TeamCreationError,
    UnclassifiedRemoteError,
)


@pytest.mark.parametrize(
    "exc_class",
    [
        ConfigError,
        ExportError,
        StagingError,
        TeamCreationError,
        ChannelCreationError,
    ],
)
def test_subclasses_migrator_error(exc_class):
    assert issubclass(exc_class, MigratorError)
    with pytest.raises(MigratorError, match="boom"):
        raise exc_class("boom")


def test_retry_budget_exhausted_error_attributes():
    error = RetryBudgetExhaustedError("create channel", 10)

    assert isinstance(error, MigratorError)
    assert error.operation == "create channel"
    assert error.limit == 10
    assert str(error) == "Out of tries! Retry budget of 10 exhausted in create channel"


def test_unclassified_remote_error_keeps_cause():
    cause = requests.ConnectionError("connection reset by peer")
    error = UnclassifiedRemoteError("list users", cause)

    assert isinstance(error, MigratorError)
    assert error.cause is cause
    assert error.operation == "list users"
    assert "connection reset by peer" in str(error)


def test_migrator_error_is_an_exception():
    assert issubclass(MigratorError, Exception)
