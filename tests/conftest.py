"""Shared fixtures."""

from __future__ import annotations

import logging

import pytest

from cloudflare_ddns.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handler, level and propagation changes made by setup_logging()."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
