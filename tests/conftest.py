from __future__ import annotations

import logging
from typing import Generator

import pytest

import depsource.utils.console as console_module
import depsource.utils.logger as logger_module


def _reset_logging() -> None:
    root_logger = logging.getLogger(logger_module.ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False


@pytest.fixture(autouse=True)
def clean_logger_state() -> Generator[None, None, None]:
    """Undo any logging configuration a test (or a CLI run) installed.

    Yields:
        None
    """
    _reset_logging()
    yield
    _reset_logging()


@pytest.fixture(autouse=True)
def clean_console_state() -> Generator[None, None, None]:
    """Drop the cached Rich console so each test sees its own environment."""
    console_module.reconfigure_console()
    yield
    console_module.reconfigure_console()
