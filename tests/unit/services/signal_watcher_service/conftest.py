"""Fixtures for signal_watcher_service unit tests."""

import pytest

from signalmice.services.signal_watcher_service import SignalWatcher

TEST_KEY = "signalmice:test-key"


class InMemorySignalRepository:
    """Dictionary-backed stand-in for SignalRepository."""

    def __init__(self, key=TEST_KEY):
        self.key = key
        self.store = {}
        self.get_calls = 0
        self.delete_calls = 0

    def get(self):
        self.get_calls += 1
        return self.store.get(self.key)

    def delete(self):
        self.delete_calls += 1
        return 1 if self.store.pop(self.key, None) is not None else 0


@pytest.fixture
def repository():
    return InMemorySignalRepository()


@pytest.fixture
def watcher(repository):
    return SignalWatcher(repository)
