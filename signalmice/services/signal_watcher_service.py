"""Detects and consumes the shutdown signal key."""
import logging

import redis

from signalmice.repositories.signal_repository import SignalRepository

logger = logging.getLogger(__name__)


class SignalCheckError(RuntimeError):
    """Raised when the signal key could not be read or cleared."""


class SignalWatcher:
    """Check-and-clear against a single Redis key."""

    def __init__(self, repository: SignalRepository):
        self.repository = repository

    @property
    def key(self) -> str:
        return self.repository.key

    def check(self) -> bool:
        """Return True when the key was present and has been deleted.

        The value is never inspected. GET and DEL are separate round trips, so a
        write landing between them is consumed along with the first one.
        """
        try:
            value = self.repository.get()
        except redis.RedisError as err:
            raise SignalCheckError(f"failed to get key {self.key}: {err}") from err

        if value is None:
            logger.debug("Redis key not found, continuing to monitor...")
            return False

        try:
            self.repository.delete()
        except redis.RedisError as err:
            raise SignalCheckError(f"failed to delete key {self.key}: {err}") from err

        return True
