"""Fixtures for audit_service unit tests."""

import logging
from unittest.mock import MagicMock

import pytest

from signalmice.models.identity import AgentIdentity
from signalmice.services.audit_service import AuditHandler


@pytest.fixture
def identity():
    return AgentIdentity(hostname="node-1", service="signalmice", monitored_key="signalmice:test-key")


@pytest.fixture
def mock_client():
    """A mock OpenSearchClient."""
    return MagicMock()


@pytest.fixture
def audit_handler(mock_client, identity):
    """An AuditHandler whose worker has not been started."""
    handler = AuditHandler(mock_client, identity, base_index="test-logs", use_daily_index=False, queue_size=10)
    yield handler
    handler.close(timeout=1)


@pytest.fixture
def make_record():
    """Build a LogRecord, optionally carrying structured fields."""
    def _make(message="hello", level=logging.INFO, name="signalmice.test", fields=None):
        record = logging.LogRecord(name, level, __file__, 1, message, (), None)
        record.created = 1700000000.0  # 2023-11-14T22:13:20Z
        if fields is not None:
            record.fields = fields
        return record
    return _make
