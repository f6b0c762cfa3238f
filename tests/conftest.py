"""Shared pytest fixtures for the readprops test suite."""

import pytest

from readprops.logger import reset_loggers


@pytest.fixture(autouse=True)
def _reset_shared_loggers():
    """Drop loggers cached by get_logger so no test sees another test's streams."""
    yield
    reset_loggers()
