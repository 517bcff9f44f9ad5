"""Audit event document shipped to Opensearch."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
INDEX_DATE_FORMAT = "%Y-%m-%d"

# Python level name -> wire level
LEVEL_NAMES = {
    'DEBUG': 'DEBUG',
    'INFO': 'INFO',
    'WARNING': 'WARN',
    'ERROR': 'ERROR',
    'CRITICAL': 'ERROR',
}


@dataclass
class AuditEvent:
    """A single structured log event."""

    timestamp: datetime
    level: str
    message: str
    hostname: str
    service: str
    redis_key: str = ""
    extra: Optional[Dict[str, Any]] = None

    @staticmethod
    def wire_level(levelname: str) -> str:
        return LEVEL_NAMES.get(levelname, 'INFO')

    def index_name(self, base_index: str, use_daily_index: bool) -> str:
        """Return the target index, optionally suffixed with the event's UTC day."""
        if not use_daily_index:
            return base_index
        day = self.timestamp.astimezone(timezone.utc).strftime(INDEX_DATE_FORMAT)
        return f"{base_index}-{day}"

    def to_document(self) -> Dict[str, Any]:
        document = {
            '@timestamp': self.timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT),
            'level': self.level,
            'message': self.message,
            'hostname': self.hostname,
            'service': self.service,
        }
        if self.redis_key:
            document['redis_key'] = self.redis_key
        if self.extra:
            document['extra'] = self.extra
        return document
