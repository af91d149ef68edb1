import logging

import pytest

pytest_plugins = [
    'tests.fixtures.cursors',
    'tests.fixtures.sqlite',
]


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    """Capture reader debug logging for every test."""
    caplog.set_level(logging.DEBUG, logger='dbreader')
    yield
