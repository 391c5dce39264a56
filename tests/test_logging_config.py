"""
Tests for logging_config module.

This module tests the SensitiveFilter and SENSITIVE_PATTERNS to ensure
that the Cloudflare API key is properly masked in log messages.
"""

import logging
from typing import TYPE_CHECKING

import pytest

from cloudflare_ddns.config import LoggingConfig
from cloudflare_ddns.logging_config import (
    PACKAGE_LOGGER,
    SENSITIVE_PATTERNS,
    SensitiveFilter,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def apply_patterns(msg: str) -> str:
    """Apply all sensitive patterns to a message."""
    result = msg
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


class TestSensitivePatterns:
    """Tests for SENSITIVE_PATTERNS regex patterns."""

    @pytest.mark.parametrize(
        ("original", "expected"),
        [
            # Header line - keep 6 chars
            ("X-Auth-Key: abcdef123456", "X-Auth-Key: abcdef******"),
            # Short key - keep all available
            ("X-Auth-Key: ab", "X-Auth-Key: ab******"),
            # Case insensitive
            ("x-auth-key: ABCDEF123", "x-auth-key: ABCDEF******"),
            # Dict repr of request headers
            (
                "{'X-Auth-Email': 'me@example.com', 'X-Auth-Key': 'abcdef123456'}",
                "{'X-Auth-Email': 'me@example.com', 'X-Auth-Key': 'abcdef******'}",
            ),
            # JSON
            ('{"X-Auth-Key": "abcdef123456"}', '{"X-Auth-Key": "abcdef******"}'),
        ],
    )
    def test_auth_key_header(self, original: str, expected: str) -> None:
        """Test X-Auth-Key header masking."""
        assert apply_patterns(original) == expected

    @pytest.mark.parametrize(
        ("original", "expected"),
        [
            ("key=abcdef123456", "key=abcdef******"),
            ("key=abc", "key=abc******"),
            ("-key=abcdef123456 -domain=example.com", "-key=abcdef****** -domain=example.com"),
            ("api_key='abcdef123456' email='me@example.com'", "api_key='abcdef******' email='me@example.com'"),
            ('API_KEY="abcdef123456"', 'API_KEY="abcdef******"'),
            ("X-Auth-Key=abcdef123456", "X-Auth-Key=abcdef******"),
        ],
    )
    def test_key_assignment(self, original: str, expected: str) -> None:
        """Test key= and api_key= masking (keeps first 6 chars)."""
        assert apply_patterns(original) == expected

    def test_format_placeholder_untouched(self) -> None:
        """Test that a %-style placeholder after the prefix is left alone."""
        assert apply_patterns("Using key=%s") == "Using key=%s"
        assert apply_patterns("X-Auth-Key: %s") == "X-Auth-Key: %s"

    def test_masking_is_stable(self) -> None:
        """Test that masking an already masked message changes nothing."""
        masked = apply_patterns("X-Auth-Key: abcdef123456")
        assert apply_patterns(masked) == masked

    @pytest.mark.parametrize(
        "original",
        [
            "Normal log message without sensitive data",
            "X-Auth-Email: me@example.com",
            "monkey=banana",  # Not 'key='
            "subdomain=home",
            "Updating record for home.example.com",
        ],
    )
    def test_non_matching_unchanged(self, original: str) -> None:
        """Test that non-matching strings are not modified."""
        assert apply_patterns(original) == original


class TestSensitiveFilter:
    """Tests for SensitiveFilter logging filter."""

    @pytest.fixture
    def log_filter(self) -> SensitiveFilter:
        """Create a SensitiveFilter instance."""
        return SensitiveFilter()

    @pytest.fixture
    def make_record(self) -> "Callable[..., logging.LogRecord]":
        """Create a factory for log records."""

        def _make_record(msg: str, args: object = ()) -> logging.LogRecord:
            return logging.LogRecord(
                name="test",
                level=logging.INFO,
                pathname="",
                lineno=0,
                msg=msg,
                args=args,  # type: ignore[arg-type]
                exc_info=None,
            )

        return _make_record

    def test_filter_always_returns_true(self, log_filter, make_record) -> None:
        record = make_record("any message")
        assert log_filter.filter(record) is True

    def test_filter_masks_message(self, log_filter, make_record) -> None:
        record = make_record("X-Auth-Key: abcdef123456")
        log_filter.filter(record)
        assert record.msg == "X-Auth-Key: abcdef******"

    def test_filter_masks_tuple_args(self, log_filter, make_record) -> None:
        record = make_record("Headers: %s (%d)", ("X-Auth-Key: abcdef123456", 3))
        log_filter.filter(record)
        assert record.args == ("X-Auth-Key: abcdef******", 3)
        assert record.getMessage() == "Headers: X-Auth-Key: abcdef****** (3)"

    def test_filter_masks_dict_args(self, log_filter) -> None:
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="Flags %(flags)s",
            args=({"flags": "-key=abcdef123456", "count": 1},),
            exc_info=None,
        )
        log_filter.filter(record)
        assert isinstance(record.args, dict)
        assert record.args["flags"] == "-key=abcdef******"
        assert record.args["count"] == 1

    def test_filter_handles_empty_message(self, log_filter, make_record) -> None:
        record = make_record("")
        assert log_filter.filter(record) is True
        assert record.msg == ""


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_console_only(self) -> None:
        setup_logging(LoggingConfig(level="DEBUG"))
        logger = logging.getLogger(PACKAGE_LOGGER)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False
        assert any(isinstance(f, SensitiveFilter) for f in logger.handlers[0].filters)

    def test_repeated_setup_does_not_duplicate_handlers(self) -> None:
        setup_logging(LoggingConfig())
        setup_logging(LoggingConfig())
        assert len(logging.getLogger(PACKAGE_LOGGER).handlers) == 1

    def test_file_logging_masks_key(self, tmp_path: "Path") -> None:
        log_path = tmp_path / "logs" / "ddns.log"
        setup_logging(
            LoggingConfig(level="INFO", file_enabled=True, file_path=str(log_path)),
        )
        logger = logging.getLogger(f"{PACKAGE_LOGGER}.test")
        logger.info("Using key=abcdef123456")
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.flush()

        content = log_path.read_text(encoding="utf-8")
        assert "Using key=abcdef******" in content
        assert "abcdef123456" not in content
