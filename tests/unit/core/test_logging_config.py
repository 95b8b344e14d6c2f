"""
Tests for logging infrastructure.
"""

import json
import logging

import pytest

from sbrest.core.logging_config import (
    JSONFormatter,
    SensitiveDataFilter,
    _parse_size,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    package_logger = logging.getLogger("sbrest")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


def make_record(msg, args=None):
    return logging.LogRecord("sbrest.test", logging.INFO, __file__, 1, msg, args, None)


class TestLoggingSetup:
    """Test suite for logging setup."""

    def test_setup_logging_defaults(self):
        logger = setup_logging()

        assert logger.name == "sbrest"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_root_logger_untouched(self):
        root_handlers = list(logging.getLogger().handlers)

        setup_logging(level="DEBUG")

        assert logging.getLogger().handlers == root_handlers

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "sbrest.log"
        setup_logging(log_file=str(log_file))

        logging.getLogger("sbrest.auth").info("Test message")

        assert "Test message" in log_file.read_text()

    def test_file_output_is_redacted(self, tmp_path):
        log_file = tmp_path / "sbrest.log"
        setup_logging(log_file=str(log_file))

        logging.getLogger("sbrest.auth").info("conn: %s", "Endpoint=sb://ns/;SharedAccessKey=secret123")

        content = log_file.read_text()
        assert "secret123" not in content
        assert "***REDACTED***" in content

    def test_module_levels(self):
        setup_logging(level="INFO", module_levels={"sbrest.auth.credentials": "DEBUG"})

        assert logging.getLogger("sbrest.auth.credentials").level == logging.DEBUG
        logging.getLogger("sbrest.auth.credentials").setLevel(logging.NOTSET)


class TestSensitiveDataFilter:
    """Test redaction of secrets."""

    @pytest.mark.parametrize("message,secret", [
        ("Endpoint=sb://ns/;SharedAccessKeyName=root;SharedAccessKey=abc123=", "abc123"),
        ("token SharedAccessSignature sig=AbC%2B&se=1&skn=root", "AbC%2B"),
        ("Authorization: SharedAccessSignature sig=xyz&se=1", "xyz"),
    ])
    def test_redacts(self, message, secret):
        record = make_record(message)

        assert SensitiveDataFilter().filter(record) is True
        assert secret not in record.msg

    def test_redacts_formatted_args(self):
        record = make_record("using %s", ("SharedAccessKey=abc123",))

        SensitiveDataFilter().filter(record)

        assert "abc123" not in record.getMessage()

    def test_plain_messages_unchanged(self):
        record = make_record("Built receive request")

        SensitiveDataFilter().filter(record)

        assert record.msg == "Built receive request"


class TestJSONFormatter:
    """Test JSON output."""

    def test_format(self):
        output = json.loads(JSONFormatter().format(make_record("hello")))

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["module"] == "sbrest.test"


class TestParseSize:
    @pytest.mark.parametrize("size,expected", [
        ("10MB", 10 * 1024 ** 2),
        ("1GB", 1024 ** 3),
        ("512KB", 512 * 1024),
        ("100B", 100),
        ("42", 42),
    ])
    def test_parse_size(self, size, expected):
        assert _parse_size(size) == expected
