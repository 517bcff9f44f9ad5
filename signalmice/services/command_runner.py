"""Execution of external OS commands behind a swappable interface."""
import logging
import subprocess
from threading import Event
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when an external command could not be run or exited non-zero."""

    def __init__(self, command: str, reason: str, output: str = ""):
        self.command = command
        self.reason = reason
        self.output = output
        message = f"{command} failed: {reason}"
        if output:
            message = f"{message}, output: {output.strip()}"
        super().__init__(message)


class CommandRunner(Protocol):
    """Protocol describing how shutdown methods run commands."""

    def run(self, name: str, args: Sequence[str], cancel_event: Optional[Event] = None) -> str:
        """Run a command and return its combined output; raise CommandError on failure."""


class SubprocessCommandRunner:
    """Run commands with subprocess, bounded by a timeout."""

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def run(self, name: str, args: Sequence[str], cancel_event: Optional[Event] = None) -> str:
        command = " ".join([name, *args])

        # Once launched, a command runs to completion or timeout.
        if cancel_event is not None and cancel_event.is_set():
            raise CommandError(command, "cancelled before launch")

        logger.debug("Running command: %s", command)
        try:
            completed = subprocess.run(
                [name, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as err:
            raise CommandError(command, "executable not found") from err
        except PermissionError as err:
            raise CommandError(command, "permission denied") from err
        except subprocess.TimeoutExpired as err:
            output = err.output.decode(errors="replace") if err.output else ""
            raise CommandError(command, f"timed out after {self._timeout}s", output) from err

        output = completed.stdout.decode(errors="replace") if completed.stdout else ""
        if completed.returncode != 0:
            raise CommandError(command, f"exit status {completed.returncode}", output)

        return output
