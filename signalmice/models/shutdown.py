"""Data models for shutdown orchestration."""
from dataclasses import dataclass
from threading import Event
from typing import Callable, Optional


@dataclass(frozen=True)
class ShutdownMethod:
    """A named way of powering off the host.

    The action receives the shared cancellation event, returns on success and
    raises on failure.
    """

    name: str
    action: Callable[[Event], None]


@dataclass(frozen=True)
class ShutdownAttemptResult:
    """Outcome of one method within one orchestration run."""

    method_name: str
    succeeded: bool
    error: Optional[BaseException] = None

    def to_dict(self) -> dict:
        return {
            'method': self.method_name,
            'succeeded': self.succeeded,
            'error': str(self.error) if self.error else None,
        }
