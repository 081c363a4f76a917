"""Unit tests for the logging utilities."""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

from space_migrator.utils import logging as log_utils
from space_migrator.utils.logging import (
    ChannelFilter,
    EnhancedFormatter,
    MainLogFilter,
    log_api_request,
    log_failed_message,
    log_with_context,
    remove_channel_logger,
    setup_channel_logger,
    setup_logger,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("space_migrator", logging.INFO, __file__, 1, "msg", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFilters:
    """Tests for the main/channel log filters."""

    def test_main_filter_drops_channel_records(self):
        assert MainLogFilter().filter(_record())
        assert not MainLogFilter().filter(_record(channel="eng-backend"))

    def test_channel_filter_keeps_only_its_channel(self):
        channel_filter = ChannelFilter("eng-backend")
        assert channel_filter.filter(_record(channel="eng-backend"))
        assert not channel_filter.filter(_record(channel="random"))
        assert not channel_filter.filter(_record())


class TestEnhancedFormatter:
    """Tests for EnhancedFormatter."""

    def test_api_details_are_appended(self):
        formatter = EnhancedFormatter(include_api_details=True)
        output = formatter.format(_record(api_data='{"a": 1}', response="ok"))
        assert 'API Data: {"a": 1}' in output
        assert "Response: ok" in output

    def test_api_details_hidden_by_default(self):
        output = EnhancedFormatter().format(_record(api_data="secret"))
        assert "API Data" not in output

    def test_verbose_format_includes_location(self):
        output = EnhancedFormatter(verbose=True).format(_record())
        assert "[test_logging:1]" in output


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_console_only(self):
        logger = setup_logger()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO

    def test_verbose_console(self):
        logger = setup_logger(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_main_log_file(self, tmp_path):
        logger = setup_logger(output_dir=str(tmp_path))

        log_with_context(logging.INFO, "main record")
        log_with_context(logging.INFO, "channel record", channel="eng-backend")
        for handler in logger.handlers:
            handler.flush()

        content = (tmp_path / "migration.log").read_text()
        assert "main record" in content
        assert "channel record" not in content

    def test_debug_api_creates_api_log(self, tmp_path):
        setup_logger(debug_api=True, output_dir=str(tmp_path))

        assert log_utils.is_debug_api_enabled()
        assert os.path.exists(tmp_path / "api_debug.log")
        setup_logger()
        assert not log_utils.is_debug_api_enabled()

        urllib3_logger = logging.getLogger("urllib3")
        for handler in urllib3_logger.handlers[:]:
            urllib3_logger.removeHandler(handler)
            handler.close()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logger()
        logger = setup_logger()
        assert len(logger.handlers) == 1


class TestChannelLogger:
    """Tests for per-channel log files."""

    def test_routes_channel_records(self, tmp_path):
        setup_logger()
        handler = setup_channel_logger(str(tmp_path), "eng-backend")

        log_with_context(logging.INFO, "for backend", channel="eng-backend")
        log_with_context(logging.INFO, "for random", channel="random")
        log_with_context(logging.INFO, "for main")
        remove_channel_logger(handler)

        content = (tmp_path / "channel_logs" / "eng-backend_migration.log").read_text()
        assert "for backend" in content
        assert "for random" not in content
        assert "for main" not in content
        assert handler not in logging.getLogger("space_migrator").handlers


class TestLogWithContext:
    """Tests for log_with_context."""

    def test_none_values_are_dropped(self):
        with patch.object(logging.getLogger("space_migrator"), "log") as mock_log:
            log_with_context(logging.INFO, "hello", channel=None, team="Engineering")

        mock_log.assert_called_once_with(
            logging.INFO, "hello", extra={"team": "Engineering"}, exc_info=None
        )

    def test_api_keys_get_defaults(self):
        with patch.object(logging.getLogger("space_migrator"), "log") as mock_log:
            log_with_context(logging.DEBUG, "req", api_data="{}")

        extra = mock_log.call_args.kwargs["extra"]
        assert extra == {"api_data": "{}", "response": ""}


class TestApiLogging:
    """Tests for API request logging."""

    def test_disabled_without_debug_api(self):
        setup_logger(debug_api=False)
        with patch.object(log_utils, "log_with_context") as mock_log:
            log_api_request("POST", "https://x", {"a": 1})
        mock_log.assert_not_called()

    def test_secrets_are_redacted(self):
        setup_logger(debug_api=True)
        try:
            with patch.object(log_utils, "log_with_context") as mock_log:
                log_api_request("POST", "https://x", {"client_secret": "s", "name": "n"})
        finally:
            setup_logger()

        api_data = mock_log.call_args.kwargs["api_data"]
        assert "[REDACTED]" in api_data
        assert '"n"' in api_data
        assert '"s"' not in api_data


def test_log_failed_message_goes_to_channel():
    with patch.object(log_utils, "log_with_context") as mock_log:
        log_failed_message(
            "eng-backend", "t1", "c1", 4, {"text": "hi"}, 429, "Too Many Requests", "slow"
        )

    messages = [c.args[1] for c in mock_log.call_args_list]
    assert messages[0] == "Failed message import on message 5"
    assert "Request returned status code: 429 (Too Many Requests)" in messages
    assert all(c.kwargs["channel"] == "eng-backend" for c in mock_log.call_args_list)
