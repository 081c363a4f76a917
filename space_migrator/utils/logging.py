"""
Logging module for the Space to Teams migration tool
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

LOGGER_NAME = "space_migrator"

# Module-level flag to track if API debug logging is enabled
_DEBUG_API_ENABLED = False

_SENSITIVE_KEYS = ("token", "auth", "password", "secret", "client_id")


class EnhancedFormatter(logging.Formatter):
    """
    Formatter that supports both verbose mode (with source location)
    and API debug mode (with request/response payloads)
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        verbose: bool = False,
        include_api_details: bool = False,
    ) -> None:
        if verbose:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
        elif not fmt:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt, datefmt, style)  # type: ignore[arg-type]
        self.include_api_details = include_api_details

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)

        if self.include_api_details:
            if getattr(record, "api_data", None):
                result += f"\nAPI Data: {record.api_data}"
            if getattr(record, "response", None):
                result += f"\nResponse: {record.response}"

        return result


class MainLogFilter(logging.Filter):
    """Keep records without a channel attribute; those go to channel logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not getattr(record, "channel", None)


class ChannelFilter(logging.Filter):
    """Keep only records tagged with one channel."""

    def __init__(self, channel: str) -> None:
        super().__init__()
        self.channel = channel

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, "channel", None) == self.channel


def setup_main_log_file(
    output_dir: str, debug_api: bool = False
) -> logging.FileHandler:
    """
    Set up a file handler for the main log file that contains non-channel-specific logs.

    Args:
        output_dir: The output directory path
        debug_api: If True, include API request/response payloads

    Returns:
        The file handler for the main log file
    """
    os.makedirs(output_dir, exist_ok=True)
    log_file = os.path.join(output_dir, "migration.log")

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        EnhancedFormatter(
            "%(asctime)s - %(levelname)s - %(message)s",
            include_api_details=debug_api,
        )
    )
    file_handler.addFilter(MainLogFilter())

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(file_handler)

    logger.info(f"Main log file created at: {log_file}")
    return file_handler


def setup_logger(
    verbose: bool = False, debug_api: bool = False, output_dir: str | None = None
) -> logging.Logger:
    """
    Set up and return the logger with appropriate formatting.

    Args:
        verbose: If True, set console handler to DEBUG level; otherwise INFO level
        debug_api: If True, enable detailed API request/response logging
        output_dir: Optional output directory for the main log file

    Returns:
        Configured logger instance
    """
    global _DEBUG_API_ENABLED
    _DEBUG_API_ENABLED = debug_api

    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers to prevent duplicate messages
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(
        EnhancedFormatter(verbose=verbose, include_api_details=debug_api)
    )
    logger.addHandler(console_handler)

    if output_dir:
        setup_main_log_file(output_dir, debug_api)

    if debug_api:
        urllib3_logger = logging.getLogger("urllib3")
        urllib3_logger.setLevel(logging.DEBUG)

        if output_dir:
            api_log_file = os.path.join(output_dir, "api_debug.log")
            api_handler = logging.FileHandler(api_log_file, mode="w", encoding="utf-8")
            api_handler.setLevel(logging.DEBUG)
            api_handler.setFormatter(EnhancedFormatter(include_api_details=True))
            api_handler.addFilter(
                lambda record: hasattr(record, "api_data")
                or hasattr(record, "response")
            )
            logger.addHandler(api_handler)
            urllib3_logger.addHandler(api_handler)
            logger.info(f"API debug logging enabled, writing to {api_log_file}")
        else:
            logger.info("API debug logging enabled, writing to console")

    return logger


def setup_channel_logger(
    output_dir: str, channel: str, verbose: bool = False, debug_api: bool = False
) -> logging.FileHandler:
    """
    Set up a file handler for channel-specific logging.

    Args:
        output_dir: The output directory path
        channel: The channel name
        verbose: If True, use the verbose format
        debug_api: If True, include API request/response payloads

    Returns:
        The file handler for the channel log
    """
    logs_dir = os.path.join(output_dir, "channel_logs")
    os.makedirs(logs_dir, exist_ok=True)

    safe_name = channel.replace(os.sep, "_")
    log_file = os.path.join(logs_dir, f"{safe_name}_migration.log")

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        EnhancedFormatter(verbose=verbose, include_api_details=debug_api)
    )
    file_handler.addFilter(ChannelFilter(channel))

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(file_handler)

    logger.info(f"Channel log file created at: {log_file}", extra={"channel": channel})
    return file_handler


def remove_channel_logger(handler: logging.Handler) -> None:
    """Detach and close a channel log handler once the channel is done."""
    logging.getLogger(LOGGER_NAME).removeHandler(handler)
    handler.close()


def log_with_context(level: int, message: str, **kwargs: Any) -> None:
    """
    Log a message with additional context information.

    Args:
        level: The logging level (e.g., logging.INFO)
        message: The log message
        **kwargs: Additional context to include in the log record
    """
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    exc_info = filtered_kwargs.pop("exc_info", None)

    if "api_data" in filtered_kwargs or "response" in filtered_kwargs:
        extras = {"api_data": "", "response": "", **filtered_kwargs}
    else:
        extras = filtered_kwargs

    logging.getLogger(LOGGER_NAME).log(level, message, extra=extras, exc_info=exc_info)


def _redact(data: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "[REDACTED]"
        if any(sensitive in key.lower() for sensitive in _SENSITIVE_KEYS)
        else value
        for key, value in data.items()
    }


def log_api_request(
    method: str, url: str, data: dict[str, Any] | None = None, **kwargs: Any
) -> None:
    """
    Log an API request when API debug mode is on.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: The API endpoint URL
        data: Optional request payload
        **kwargs: Additional context to include in the log record
    """
    if not is_debug_api_enabled():
        return

    log_context = kwargs.copy()
    if data and isinstance(data, dict):
        log_context["api_data"] = json.dumps(_redact(data), indent=2, default=str)

    log_with_context(logging.DEBUG, f"API Request: {method} {url}", **log_context)


def log_api_response(
    status_code: int, url: str, response_data: Any = None, **kwargs: Any
) -> None:
    """
    Log an API response when API debug mode is on.

    Args:
        status_code: HTTP status code
        url: The API endpoint URL
        response_data: Optional decoded response body
        **kwargs: Additional context to include in the log record
    """
    if not is_debug_api_enabled():
        return

    log_context = kwargs.copy()
    if response_data:
        if isinstance(response_data, (dict, list)):
            response_str = json.dumps(response_data, indent=2, default=str)
            if len(response_str) > 2000:
                response_str = response_str[:2000] + "... [truncated]"
        else:
            response_str = str(response_data)
            if len(response_str) > 1000:
                response_str = response_str[:1000] + "... [truncated]"
        log_context["response"] = response_str

    log_with_context(
        logging.DEBUG, f"API Response: {status_code} from {url}", **log_context
    )


def log_failed_message(
    channel: str,
    team_id: str,
    channel_id: str,
    index: int,
    message: dict[str, Any],
    status_code: int | None,
    reason: str,
    error: str,
) -> None:
    """
    Log everything needed to diagnose a failed message import.

    Args:
        channel: The channel name (routes the record to the channel log)
        team_id: Teams team id
        channel_id: Teams channel id
        index: Zero-based position of the message in the staged channel
        message: The raw staged message
        status_code: HTTP status code of the failure
        reason: HTTP reason phrase
        error: Error message returned by the API
    """
    log_with_context(
        logging.ERROR,
        f"Failed message import on message {index + 1}",
        channel=channel,
        team_id=team_id,
        channel_id=channel_id,
        message_index=index,
    )
    log_with_context(logging.ERROR, f"TeamID: {team_id}", channel=channel)
    log_with_context(logging.ERROR, f"ChannelID: {channel_id}", channel=channel)
    log_with_context(
        logging.ERROR,
        f"Message: {json.dumps(message, indent=2, ensure_ascii=False, default=str)}",
        channel=channel,
    )
    log_with_context(
        logging.ERROR,
        f"Request returned status code: {status_code} ({reason})",
        channel=channel,
    )
    log_with_context(logging.ERROR, f"Error message: {error}", channel=channel)


def is_debug_api_enabled() -> bool:
    """Check if API debug logging is enabled."""
    return _DEBUG_API_ENABLED


def get_logger() -> logging.Logger:
    """Get the space_migrator logger, creating it with defaults if needed."""
    migrator_logger = logging.getLogger(LOGGER_NAME)
    if not migrator_logger.handlers:
        migrator_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(EnhancedFormatter())
        migrator_logger.addHandler(handler)
    return migrator_logger


# Module logger - will be properly initialized when setup_logger is called
logger = get_logger()
