"""Shared fixtures for the opskit test suite."""

import logging
from collections.abc import Generator

import pytest

from opskit.logging import get_logger
from opskit.testing.conftest import *  # noqa: F401,F403


@pytest.fixture(autouse=True)
def _restore_opskit_logging() -> Generator[None, None, None]:
    """Drop handlers installed by configure_logging() during a test."""
    logger = get_logger()
    handlers = list(logger.handlers)
    level = logger.level
    command_level = logging.getLogger("opskit.command").level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
    logging.getLogger("opskit.command").setLevel(command_level)
