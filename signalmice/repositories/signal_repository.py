"""Repository for the Redis key that carries the shutdown signal."""
import logging
from typing import Optional

import redis

logger = logging.getLogger(__name__)


class SignalRepository:
    """Thin get/delete wrapper around a single Redis key."""

    def __init__(self, client: redis.Redis, key: str):
        self._client = client
        self._key = key

    @classmethod
    def from_config(cls, config) -> "SignalRepository":
        """Create a repository from configuration without connecting yet."""
        client = redis.Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD or None,
            db=config.REDIS_DB,
            socket_timeout=10,
            socket_connect_timeout=10,
        )
        return cls(client, config.REDIS_KEY)

    @property
    def key(self) -> str:
        """The key being monitored."""
        return self._key

    def ping(self) -> None:
        """Verify the store is reachable; raises redis.RedisError otherwise."""
        self._client.ping()

    def get(self) -> Optional[bytes]:
        """Return the raw value of the key, or None when it is absent."""
        return self._client.get(self._key)

    def delete(self) -> int:
        """Delete the key and return the number of keys removed."""
        return self._client.delete(self._key)

    def close(self) -> None:
        try:
            self._client.close()
        except redis.RedisError:
            logger.debug("Failed to close Redis client", exc_info=True)
