"""Shared fixtures for the bebopc test suite."""

import logging

import pytest

from bebopc.log import ROOT_LOGGER


@pytest.fixture(autouse=True)
def _reset_bebopc_logger():
    """Undo configure_logging() so handlers never outlive a test's streams."""
    logger = logging.getLogger(ROOT_LOGGER)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
