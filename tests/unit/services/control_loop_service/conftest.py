"""Fixtures for control_loop_service unit tests."""

import signal
from unittest.mock import MagicMock

import pytest

from signalmice.services.control_loop_service import ControlLoop


@pytest.fixture
def mock_watcher():
    watcher = MagicMock()
    watcher.key = "signalmice:test-key"
    watcher.check.return_value = False
    return watcher


@pytest.fixture
def mock_orchestrator():
    orchestrator = MagicMock()
    orchestrator.execute.return_value = []
    return orchestrator


@pytest.fixture
def make_loop(mock_watcher, mock_orchestrator):
    """Build loops over the shared mocks and release their wakeup pipes afterwards."""
    loops = []

    def _make(interval=60):
        loop = ControlLoop(mock_watcher, mock_orchestrator, interval=interval)
        loops.append(loop)
        return loop

    yield _make
    for loop in loops:
        loop.close()


@pytest.fixture
def control_loop(make_loop):
    """A loop whose interval is long enough that only explicit cycles run."""
    return make_loop(60)


@pytest.fixture
def restore_signal_handlers():
    """Put the original SIGINT/SIGTERM handlers back after the test."""
    original = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in original.items():
        signal.signal(sig, handler)
