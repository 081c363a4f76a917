"""
Bounded retry for remote calls.

Every remote call made during import goes through :func:`call_with_retry`.
All calls share one :class:`RetryBudget` per run: each attempt spends one
unit, and any success refills it. Because the budget is shared, two failing
operations with no success in between drain the same budget; this is only
sound because the migration runs strictly sequentially.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

import requests

from space_migrator.constants import RETRY_BUDGET
from space_migrator.exceptions import RetryBudgetExhaustedError, UnclassifiedRemoteError
from space_migrator.utils.api import http_error_details, is_classified_error
from space_migrator.utils.logging import log_with_context

T = TypeVar("T")


class RetryBudget:
    """Shared countdown of attempts left before the run gives up."""

    def __init__(self, limit: int = RETRY_BUDGET) -> None:
        if limit < 1:
            raise ValueError(f"Retry budget must be at least 1, got {limit}")
        self.limit = limit
        self.remaining = limit

    def use(self, operation: str) -> None:
        """Spend one attempt.

        Raises:
            RetryBudgetExhaustedError: When the budget drops below zero.
        """
        self.remaining -= 1
        if self.remaining < 0:
            log_with_context(
                logging.ERROR,
                f"Out of tries! {operation} failed {self.limit} times in a row",
                operation=operation,
            )
            raise RetryBudgetExhaustedError(operation, self.limit)

    def reset(self) -> None:
        self.remaining = self.limit

    @property
    def exhausted(self) -> bool:
        return self.remaining < 0


def log_http_error(
    error: requests.HTTPError, operation: str, channel: str | None = None
) -> None:
    """Log status code, reason phrase, and API message of a failed call."""
    status, reason, message = http_error_details(error)
    log_with_context(
        logging.WARNING,
        f"{operation}: request returned status code: {status} ({reason})",
        channel=channel,
        operation=operation,
        status_code=status,
    )
    log_with_context(
        logging.WARNING, f"Error message: {message}", channel=channel, operation=operation
    )


def call_with_retry(
    budget: RetryBudget,
    operation: str,
    func: Callable[..., T],
    *args: Any,
    retry_delay: float = 0,
    channel: str | None = None,
    **kwargs: Any,
) -> T:
    """Call ``func`` until it succeeds or the shared budget runs out.

    Args:
        budget: The run's shared retry budget.
        operation: Human-readable name of the operation, used in diagnostics.
        func: The remote call.
        *args: Positional arguments for ``func``.
        retry_delay: Seconds to wait before re-invoking after a failure.
        channel: Optional channel name, routes log records to the channel log.
        **kwargs: Keyword arguments for ``func``.

    Returns:
        Whatever ``func`` returns.

    Raises:
        RetryBudgetExhaustedError: Too many consecutive classified failures.
        UnclassifiedRemoteError: The call failed without an HTTP status.
    """
    while True:
        budget.use(operation)
        try:
            result = func(*args, **kwargs)
        except requests.RequestException as e:
            if not is_classified_error(e):
                log_with_context(
                    logging.ERROR,
                    f"Something went wrong in {operation}: {e}",
                    channel=channel,
                    operation=operation,
                )
                raise UnclassifiedRemoteError(operation, e) from e

            log_http_error(e, operation, channel)  # type: ignore[arg-type]
            log_with_context(
                logging.INFO,
                f"Retrying {operation} ({budget.remaining} tries left)",
                channel=channel,
            )
            if retry_delay:
                time.sleep(retry_delay)
            continue

        budget.reset()
        return result
