"""Shared pytest fixtures."""
import logging

import pytest

from stub_server import StubServer


@pytest.fixture
def server():
    """Fresh stub API; every request lands in server.calls."""
    return StubServer()


@pytest.fixture(autouse=True)
def _restore_logging():
    # CLI tests reconfigure the root logger
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    logging.disable(logging.NOTSET)
    root.handlers[:] = handlers
    root.setLevel(level)
