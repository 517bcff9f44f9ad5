"""Ships log records to Opensearch from a single background worker."""
import logging
import queue
import threading
from datetime import datetime, timezone
from typing import Optional

import requests

from signalmice.models.audit import AuditEvent
from signalmice.models.identity import AgentIdentity

# Console-only logger for delivery problems; the audit handler ignores it.
DELIVERY_LOGGER_NAME = "signalmice.audit.delivery"

delivery_logger = logging.getLogger(DELIVERY_LOGGER_NAME)

_STOP = object()


class OpenSearchClient:
    """Minimal Opensearch document indexing over HTTP."""

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        verify_tls: bool = False,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        if username:
            self.session.auth = (username, password)

    @classmethod
    def from_config(cls, config) -> "OpenSearchClient":
        return cls(
            url=config.OPENSEARCH_URL,
            username=config.OPENSEARCH_USERNAME,
            password=config.OPENSEARCH_PASSWORD,
            verify_tls=config.OPENSEARCH_VERIFY_TLS,
        )

    def ping(self) -> bool:
        """Return True when the cluster answers its info endpoint."""
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            delivery_logger.warning(
                "Could not connect to Opensearch: %s. Logging will continue to stdout only.", e
            )
            return False

    def index(self, index_name: str, document: dict) -> None:
        """Index one document; raises requests.RequestException on failure."""
        response = self.session.post(
            f"{self.url}/{index_name}/_doc",
            json=document,
            timeout=self.timeout,
        )
        response.raise_for_status()

    def close(self) -> None:
        self.session.close()


class AuditHandler(logging.Handler):
    """Logging handler that queues records for asynchronous Opensearch delivery.

    emit() never blocks: when the bounded queue is full the event is dropped
    and counted. One worker thread drains the queue in order; close() waits
    for it to finish what is already queued.
    """

    def __init__(
        self,
        client: OpenSearchClient,
        identity: AgentIdentity,
        base_index: str,
        use_daily_index: bool = True,
        queue_size: int = 1000,
        level=logging.NOTSET,
    ):
        super().__init__(level)
        self.client = client
        self.identity = identity
        self.base_index = base_index
        self.use_daily_index = use_daily_index
        self.dropped = 0
        self._queue = queue.Queue(maxsize=queue_size)
        self._worker = None
        self._closed = False
        self.addFilter(self._accepts)

    @classmethod
    def from_config(cls, config, identity: AgentIdentity, client: Optional[OpenSearchClient] = None):
        return cls(
            client=client or OpenSearchClient.from_config(config),
            identity=identity,
            base_index=config.OPENSEARCH_INDEX,
            use_daily_index=config.OPENSEARCH_USE_DAILY_INDEX,
            queue_size=config.AUDIT_QUEUE_SIZE,
        )

    def _accepts(self, record: logging.LogRecord) -> bool:
        """Reject delivery diagnostics and anything logged while delivering.

        Records from the worker thread (urllib3 connection logs included)
        would otherwise be shipped and logged again on every delivery.
        """
        if record.name.startswith(DELIVERY_LOGGER_NAME):
            return False
        worker = self._worker
        return worker is None or record.thread != worker.ident

    def start(self) -> None:
        """Start the delivery worker."""
        if self._worker and self._worker.is_alive():
            return
        self._worker = threading.Thread(target=self._drain, daemon=True, name="AuditShipper")
        self._worker.start()

    def build_event(self, record: logging.LogRecord) -> AuditEvent:
        extra = getattr(record, "fields", None)
        return AuditEvent(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            level=AuditEvent.wire_level(record.levelname),
            message=record.getMessage(),
            hostname=self.identity.hostname,
            service=self.identity.service,
            redis_key=self.identity.monitored_key,
            extra=dict(extra) if extra else None,
        )

    def emit(self, record: logging.LogRecord) -> None:
        if self._closed:
            return
        try:
            event = self.build_event(record)
        except Exception:
            self.handleError(record)
            return
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1

    def deliver(self, event: AuditEvent) -> None:
        """Send one event, logging failures locally."""
        index_name = event.index_name(self.base_index, self.use_daily_index)
        try:
            self.client.index(index_name, event.to_document())
        except requests.exceptions.RequestException as e:
            delivery_logger.error("Failed to send log to Opensearch: %s", e)

    def _drain(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is _STOP:
                    return
                self.deliver(event)
            finally:
                self._queue.task_done()

    def close(self, timeout: float = 5.0) -> None:
        """Flush queued events, stop the worker and close the client."""
        if not self._closed:
            self._closed = True
            if self._worker and self._worker.is_alive():
                try:
                    self._queue.put(_STOP, timeout=timeout)
                except queue.Full:
                    delivery_logger.warning("Audit queue still full at close; pending events dropped")
                self._worker.join(timeout=timeout)
            if self.dropped:
                delivery_logger.warning("Dropped %d audit events because the queue was full", self.dropped)
            self.client.close()
        super().close()


def attach_audit_handler(config, identity: AgentIdentity,
                         client: Optional[OpenSearchClient] = None) -> Optional[AuditHandler]:
    """Attach an AuditHandler to the root logger if Opensearch is reachable."""
    client = client or OpenSearchClient.from_config(config)
    if not client.ping():
        client.close()
        return None

    handler = AuditHandler.from_config(config, identity, client=client)
    handler.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
    handler.start()
    logging.getLogger().addHandler(handler)
    return handler
