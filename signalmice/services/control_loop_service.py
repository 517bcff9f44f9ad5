"""Periodic loop that watches for the signal and shuts the host down."""
import logging
import os
import select
import signal
import types
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from threading import Lock
from typing import List, Optional

from signalmice.services.shutdown_service import ShutdownFailedError, ShutdownOrchestrator
from signalmice.services.signal_watcher_service import SignalWatcher

logger = logging.getLogger(__name__)

STATE_STARTING = "starting"
STATE_RUNNING = "running"
STATE_TERMINATING = "terminating"
STATE_STOPPED = "stopped"


class WakeupEvent:
    """Event-like flag that a signal handler can set without taking any lock.

    set() only assigns a flag and writes a byte to a pipe; wait() selects on
    the read end. Offers the is_set/set/wait subset of threading.Event.
    """

    def __init__(self):
        self._flag = False
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._write_fd, False)

    def is_set(self) -> bool:
        return self._flag

    def set(self) -> None:
        if self._flag:
            return
        self._flag = True
        try:
            os.write(self._write_fd, b"\0")
        except OSError:
            pass

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until set or until timeout elapses; return the flag."""
        if not self._flag:
            try:
                select.select([self._read_fd], [], [], timeout)
            except (OSError, ValueError):
                # Closed descriptor: treat as set.
                return True
        return self._flag

    def close(self) -> None:
        for fd in (self._read_fd, self._write_fd):
            try:
                os.close(fd)
            except OSError:
                pass


@dataclass
class LoopStatus:
    """Snapshot of what the loop has done so far."""

    state: str = STATE_STARTING
    cycles: int = 0
    triggers_detected: int = 0
    last_check_at: Optional[str] = None
    last_error: Optional[str] = None
    last_shutdown_succeeded: Optional[bool] = None
    last_shutdown_attempts: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class ControlLoop:
    """Drive one detection cycle at startup and one per interval until stopped."""

    def __init__(
        self,
        watcher: SignalWatcher,
        orchestrator: ShutdownOrchestrator,
        interval: float,
        cancel_event: Optional[WakeupEvent] = None,
    ):
        self.watcher = watcher
        self.orchestrator = orchestrator
        self.interval = interval
        # Timer wait point and cancellation context for shutdown methods.
        self._cancel_event = cancel_event or WakeupEvent()
        self._received_signal: Optional[int] = None
        self._status = LoopStatus()
        self._lock = Lock()

    @property
    def cancel_event(self) -> WakeupEvent:
        return self._cancel_event

    @property
    def stopped(self) -> bool:
        return self._cancel_event.is_set()

    def status(self) -> dict:
        """Return a copy of the current status."""
        with self._lock:
            return self._status.to_dict()

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to request_stop. Must run on the main thread."""
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)

    def _handle_signal(self, sig_num: int, frame: Optional[types.FrameType]) -> None:
        self.request_stop(sig_num)

    def request_stop(self, sig_num: Optional[int] = None) -> None:
        """Ask the loop to stop; an in-flight command is left to finish.

        Safe to call from a signal handler: takes no locks and does not log.
        """
        if sig_num is not None:
            self._received_signal = sig_num
        self._cancel_event.set()

    def run(self) -> None:
        """Block until request_stop is called."""
        self._set_state(STATE_RUNNING)
        logger.info(
            "Starting Redis key monitoring (key: %s, interval: %ss)",
            self.watcher.key, self.interval,
        )

        # First cycle runs before the first interval elapses.
        if not self.stopped:
            self.run_cycle()

        while not self._cancel_event.wait(self.interval):
            self.run_cycle()

        self._set_state(STATE_TERMINATING)
        if self._received_signal is not None:
            sig_name = signal.Signals(self._received_signal).name
            logger.info("Received shutdown signal", extra={"fields": {"signal": sig_name}})

        self._set_state(STATE_STOPPED)
        logger.info("Graceful shutdown complete")

    def close(self) -> None:
        """Release the wakeup pipe."""
        self._cancel_event.close()

    def run_cycle(self) -> bool:
        """Perform one detection cycle; return True when the signal was found."""
        try:
            detected = self.watcher.check()
        except Exception as e:
            logger.error("Error checking Redis key: %s", e, extra={"fields": {"error": str(e)}})
            with self._lock:
                self._status.cycles += 1
                self._status.last_check_at = _utcnow()
                self._status.last_error = str(e)
            return False

        with self._lock:
            self._status.cycles += 1
            self._status.last_check_at = _utcnow()
            self._status.last_error = None
            if detected:
                self._status.triggers_detected += 1

        if not detected:
            return False

        logger.info(
            "Shutdown signal received! Key found and deleted.",
            extra={"fields": {"key": self.watcher.key}},
        )
        self._shutdown()
        return True

    def _shutdown(self) -> None:
        try:
            attempts = self.orchestrator.execute(self._cancel_event)
        except ShutdownFailedError as e:
            logger.error("Failed to initiate host shutdown: %s", e, extra={"fields": {"error": str(e)}})
            self._record_shutdown(False, e.attempts, str(e))
            return
        except Exception as e:
            logger.error("Failed to initiate host shutdown: %s", e, exc_info=True)
            self._record_shutdown(False, [], str(e))
            return

        logger.info("Host shutdown initiated successfully")
        self._record_shutdown(True, attempts, None)

    def _record_shutdown(self, succeeded, attempts, error) -> None:
        with self._lock:
            self._status.last_shutdown_succeeded = succeeded
            self._status.last_shutdown_attempts = [attempt.to_dict() for attempt in attempts]
            if error:
                self._status.last_error = error

    def _set_state(self, state: str) -> None:
        with self._lock:
            self._status.state = state


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
