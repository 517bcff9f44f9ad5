"""Agent identity resolved once at startup."""
import socket
from dataclasses import dataclass


@dataclass(frozen=True)
class AgentIdentity:
    """Who is logging: host, service name and the key being watched."""

    hostname: str
    service: str
    monitored_key: str

    @classmethod
    def resolve(cls, config) -> "AgentIdentity":
        """Build the identity from configuration and the local hostname."""
        try:
            hostname = socket.gethostname()
        except OSError:
            hostname = ""
        return cls(
            hostname=hostname,
            service=config.SERVICE_NAME,
            monitored_key=config.REDIS_KEY,
        )
