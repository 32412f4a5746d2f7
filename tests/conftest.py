"""Shared fixtures."""

import logging

import pytest

from pixel_parity.core.logger import console_handler


@pytest.fixture(autouse=True)
def library_logging():
    """Undo any CLI logging setup so each test starts with propagating library loggers."""
    yield
    root = logging.getLogger('pixel_parity')
    root.removeHandler(console_handler)
    root.propagate = True
    root.setLevel(logging.NOTSET)
