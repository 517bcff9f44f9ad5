"""Service responsible for powering off the host this agent runs on."""
import logging
import os
from threading import Event
from typing import List, Optional, Sequence

from signalmice.models.shutdown import ShutdownAttemptResult, ShutdownMethod
from signalmice.services.command_runner import CommandRunner, CommandError

logger = logging.getLogger(__name__)

SYSRQ_TRIGGER = "sysrq-trigger"
SYSRQ_SYNC = "s"
SYSRQ_REMOUNT_READ_ONLY = "u"
SYSRQ_POWER_OFF = "o"


class ShutdownFailedError(RuntimeError):
    """Raised when every configured shutdown method failed."""

    def __init__(self, attempts: List[ShutdownAttemptResult], last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"all shutdown methods failed, last error: {last_error}")


class HostShutdownMethods:
    """The built-in ways of powering off the host, most capable first."""

    def __init__(self, runner: CommandRunner, host_proc_path: str) -> None:
        self._runner = runner
        self._host_proc_path = host_proc_path

    @property
    def host_proc_path(self) -> str:
        return self._host_proc_path

    def default_methods(self) -> List[ShutdownMethod]:
        """Return the built-in methods in priority order."""
        return [
            ShutdownMethod("nsenter", self.shutdown_via_nsenter),
            ShutdownMethod("sysrq-trigger", self.shutdown_via_sysrq),
            ShutdownMethod("direct-command", self.shutdown_via_direct),
        ]

    def shutdown_via_nsenter(self, cancel_event: Event) -> None:
        """Enter the namespaces of host PID 1 and power off from there.

        Needs a privileged container sharing the host PID namespace.
        """
        try:
            self._runner.run(
                "nsenter",
                ["--target", "1", "--mount", "--uts", "--ipc", "--net", "--pid", "--", "poweroff"],
                cancel_event,
            )
        except CommandError as err:
            raise RuntimeError(f"nsenter poweroff failed: {err}") from err

    def shutdown_via_sysrq(self, cancel_event: Event) -> None:
        """Sync, remount read-only and power off through the host's sysrq-trigger."""
        if not os.path.exists(self._host_proc_path):
            raise FileNotFoundError(f"host proc path not mounted: {self._host_proc_path}")

        # Like a command, the write sequence is refused before it starts, never interrupted.
        if cancel_event is not None and cancel_event.is_set():
            raise RuntimeError("sysrq-trigger cancelled before first write")

        trigger_path = os.path.join(self._host_proc_path, SYSRQ_TRIGGER)

        try:
            self._write_sysrq(trigger_path, SYSRQ_SYNC)
        except OSError as err:
            logger.warning("Failed to sync filesystems via sysrq: %s", err,
                           extra={"fields": {"error": str(err)}})

        try:
            self._write_sysrq(trigger_path, SYSRQ_REMOUNT_READ_ONLY)
        except OSError as err:
            logger.warning("Failed to remount filesystems read-only via sysrq: %s", err,
                           extra={"fields": {"error": str(err)}})

        try:
            self._write_sysrq(trigger_path, SYSRQ_POWER_OFF)
        except OSError as err:
            raise RuntimeError(f"failed to write to sysrq-trigger: {err}") from err

    def shutdown_via_direct(self, cancel_event: Event) -> None:
        """Run poweroff, falling back to shutdown -h now.

        Only works when the agent can reach the host's init system directly.
        """
        try:
            self._runner.run("poweroff", [], cancel_event)
            return
        except CommandError as err:
            logger.debug("poweroff failed, trying shutdown -h now: %s", err)

        try:
            self._runner.run("shutdown", ["-h", "now"], cancel_event)
        except CommandError as err:
            raise RuntimeError(f"shutdown commands failed: {err}") from err

    @staticmethod
    def _write_sysrq(trigger_path: str, code: str) -> None:
        with open(trigger_path, "w") as trigger:
            trigger.write(code)


class ShutdownOrchestrator:
    """Run shutdown methods in priority order until one succeeds."""

    def __init__(self, methods: Sequence[ShutdownMethod]) -> None:
        self._methods = tuple(methods)

    @property
    def methods(self) -> Sequence[ShutdownMethod]:
        return self._methods

    def execute(self, cancel_event: Optional[Event] = None) -> List[ShutdownAttemptResult]:
        """Attempt each method in order and return the attempts made.

        Stops at the first method that succeeds. Raises ShutdownFailedError,
        chained to the last method's error, when none does.
        """
        if cancel_event is None:
            cancel_event = Event()

        logger.info("Initiating host machine shutdown...")

        attempts: List[ShutdownAttemptResult] = []
        last_error: Optional[BaseException] = None

        for method in self._methods:
            logger.info("Attempting shutdown via %s", method.name,
                        extra={"fields": {"method": method.name}})
            try:
                method.action(cancel_event)
            except Exception as err:
                attempts.append(ShutdownAttemptResult(method.name, False, err))
                last_error = err
                logger.warning(
                    "Shutdown via %s failed: %s", method.name, err,
                    extra={"fields": {"method": method.name, "error": str(err)}},
                )
                continue

            attempts.append(ShutdownAttemptResult(method.name, True))
            logger.info("Shutdown initiated successfully via %s", method.name,
                        extra={"fields": {"method": method.name}})
            return attempts

        raise ShutdownFailedError(attempts, last_error) from last_error
