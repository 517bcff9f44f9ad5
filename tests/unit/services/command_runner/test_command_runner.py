"""Unit tests for SubprocessCommandRunner."""

import subprocess
from threading import Event
from unittest.mock import MagicMock, patch

import pytest

from signalmice.services.command_runner import CommandError, SubprocessCommandRunner


class TestSubprocessCommandRunner:
    """Tests for SubprocessCommandRunner.run."""

    def test_returns_combined_output_on_success(self):
        completed = MagicMock(returncode=0, stdout=b"done\n")

        with patch("signalmice.services.command_runner.subprocess.run", return_value=completed) as mock_run:
            output = SubprocessCommandRunner(timeout=5).run("poweroff", [])

        assert output == "done\n"
        mock_run.assert_called_once_with(
            ["poweroff"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=5,
            check=False,
        )

    def test_non_zero_exit_raises_with_output(self):
        completed = MagicMock(returncode=1, stdout=b"Operation not permitted\n")

        with patch("signalmice.services.command_runner.subprocess.run", return_value=completed):
            with pytest.raises(CommandError) as exc_info:
                SubprocessCommandRunner().run("shutdown", ["-h", "now"])

        err = exc_info.value
        assert err.command == "shutdown -h now"
        assert "exit status 1" in str(err)
        assert "Operation not permitted" in str(err)

    def test_missing_executable_raises(self):
        with patch(
            "signalmice.services.command_runner.subprocess.run",
            side_effect=FileNotFoundError("nsenter"),
        ):
            with pytest.raises(CommandError) as exc_info:
                SubprocessCommandRunner().run("nsenter", ["--target", "1"])

        assert "executable not found" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_timeout_raises(self):
        with patch(
            "signalmice.services.command_runner.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd=["poweroff"], timeout=2),
        ):
            with pytest.raises(CommandError) as exc_info:
                SubprocessCommandRunner(timeout=2).run("poweroff", [])

        assert "timed out after 2s" in str(exc_info.value)

    def test_cancelled_before_launch_does_not_start_process(self):
        """A set cancellation event prevents new commands from launching."""
        cancel_event = Event()
        cancel_event.set()

        with patch("signalmice.services.command_runner.subprocess.run") as mock_run:
            with pytest.raises(CommandError) as exc_info:
                SubprocessCommandRunner().run("poweroff", [], cancel_event)

        assert "cancelled before launch" in str(exc_info.value)
        mock_run.assert_not_called()
