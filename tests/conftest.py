"""Shared fixtures for the CryptoTrace test suite."""

import pytest

from cryptotrace.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def reset_log_settings():
    """Undo any configure_logging call so tests never share log settings."""
    yield
    reset_logging()
