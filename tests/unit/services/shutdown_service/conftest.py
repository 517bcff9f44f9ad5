"""Fixtures for shutdown_service unit tests."""

from threading import Event

import pytest

from signalmice.services.command_runner import CommandError
from signalmice.services.shutdown_service import HostShutdownMethods


class FakeCommandRunner:
    """Records commands and fails the ones named in `failing`."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    def run(self, name, args, cancel_event=None):
        self.calls.append([name, *args])
        if name in self.failing:
            raise CommandError(" ".join([name, *args]), "exit status 1", "permission denied")
        return ""


@pytest.fixture
def runner_factory():
    """Build a FakeCommandRunner with a custom set of failing commands."""
    return FakeCommandRunner


@pytest.fixture
def fake_runner():
    """A runner on which every command succeeds."""
    return FakeCommandRunner()


@pytest.fixture
def failing_runner():
    """A runner on which every shutdown-related command fails."""
    return FakeCommandRunner(failing={"nsenter", "poweroff", "shutdown"})


@pytest.fixture
def host_proc(tmp_path):
    """A directory standing in for the host's /proc mount."""
    proc = tmp_path / "proc"
    proc.mkdir()
    return proc


@pytest.fixture
def host_methods(fake_runner, host_proc):
    return HostShutdownMethods(fake_runner, str(host_proc))


@pytest.fixture
def cancel_event():
    return Event()
