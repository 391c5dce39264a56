"""
Logging configuration for Cloudflare DDNS.

This module provides logging setup with support for console and file output.
The Cloudflare API key is automatically masked in log messages.
"""

from __future__ import annotations

import logging
import logging.handlers
import re
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Final

    from cloudflare_ddns.config import LoggingConfig


# Patterns matching the API key in log messages.
# Each tuple is (pattern, replacement); the first 6 characters are kept.
SENSITIVE_PATTERNS: Final[list[tuple[re.Pattern[str], str]]] = [
    # X-Auth-Key header, as "X-Auth-Key: ..." or in a dict repr
    (
        re.compile(
            r"(X-Auth-Key[\"']?\s*[:=]\s*[\"']?)(?![%\s])([^\s\"',}]{0,6})([^\s\"',}]*)",
            re.IGNORECASE,
        ),
        r"\1\2******",
    ),
    # key=..., api_key=..., api_key='...'
    (
        re.compile(
            r"(\b(?:api_)?key=[\"']?)(?![%\s])([^\s\"',&)]{0,6})([^\s\"',&)]*)",
            re.IGNORECASE,
        ),
        r"\1\2******",
    ),
]


# Constants
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER: Final[str] = "cloudflare_ddns"


class SensitiveFilter(logging.Filter):
    """
    A logging filter that masks the API key.

    This filter replaces everything but the first characters of the key
    with asterisks to prevent credential leakage in log files.
    """

    @staticmethod
    def _mask_sensitive(value: str) -> str:
        """
        Apply all sensitive patterns to mask a string.

        Parameters
        ----------
        value : str
            The string to process.

        Returns
        -------
        str
            The string with sensitive data masked.
        """
        result = value
        for pattern, replacement in SENSITIVE_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask sensitive data in ``record.msg`` and ``record.args``.

        Parameters
        ----------
        record : logging.LogRecord
            The log record to process.

        Returns
        -------
        bool
            Always returns True (record is always logged).
        """
        if record.msg:
            record.msg = self._mask_sensitive(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._mask_sensitive(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._mask_sensitive(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True


def _configure_handler(handler: logging.Handler) -> None:
    """
    Configure a logging handler with formatter and sensitive filter.

    Parameters
    ----------
    handler : logging.Handler
        The handler to configure.
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    sensitive_filter = SensitiveFilter()

    handler.setFormatter(formatter)
    handler.addFilter(sensitive_filter)


def setup_logging(config: LoggingConfig) -> None:
    """
    Set up logging based on configuration.

    Parameters
    ----------
    config : LoggingConfig
        Logging configuration.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    _configure_handler(console_handler)
    logger.addHandler(console_handler)

    if config.file_enabled:
        log_path = config.file_path_as_path
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.WatchedFileHandler(
                str(log_path),
                encoding="utf-8",
                delay=False,
            )
            _configure_handler(file_handler)
            logger.addHandler(file_handler)
            logger.info('File logging enabled: "%s".', log_path)
        except OSError as e:
            logger.critical("Failed to enable file logging: %s", e)
            sys.exit(1)

    # Prevent propagation to root logger
    logger.propagate = False
