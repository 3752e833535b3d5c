"""
Background export worker.

After a successful mutation through the API the affected domain is re-exported to
the XLIFF export directory. The request does not wait for this: domain names are
put on a bounded queue and a single daemon thread exports them in order.

- Failures are logged and never retried; the request that caused the export has
  already returned.
- A domain that is already waiting in the queue is not queued twice.
- When the queue is full, enqueue() waits up to `put_timeout` seconds and then
  drops the request with a warning. The next mutation of that domain queues it again.
"""

from __future__ import annotations

import queue
import threading
from typing import Any, Callable, Optional, Set

from transapi.config import EXPORT_QUEUE_SIZE
from transapi.logger import get_logger

logger = get_logger(__name__)

_STOP = object()


class ExportWorker:
    """Single-consumer queue of domain names to export."""

    def __init__(
        self,
        export_fn: Callable[[str], Any],
        maxsize: int = EXPORT_QUEUE_SIZE,
        put_timeout: float = 5.0,
    ):
        self._export_fn = export_fn
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._put_timeout = put_timeout
        self._pending: Set[str] = set()
        self._pending_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.exported_count = 0
        self.failure_count = 0
        self.dropped_count = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="xliff-export-worker", daemon=True)
        self._thread.start()
        logger.info("Export worker started (queue size %s)", self._queue.maxsize)

    def enqueue(self, domain_name: str) -> bool:
        """
        Queue a domain for export.

        Returns:
            True if the domain is queued (now or already), False if the request was dropped.
        """
        with self._pending_lock:
            if domain_name in self._pending:
                logger.debug("Export of %s already pending", domain_name)
                return True
            self._pending.add(domain_name)

        try:
            self._queue.put(domain_name, timeout=self._put_timeout)
        except queue.Full:
            with self._pending_lock:
                self._pending.discard(domain_name)
                self.dropped_count += 1
            logger.warning("Export queue full, dropped export of domain %s", domain_name)
            return False
        return True

    def join(self):
        """Block until every queued export has been processed."""
        self._queue.join()

    def stop(self, timeout: Optional[float] = 10.0):
        """Let queued exports finish, then stop the thread."""
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        logger.info(
            "Export worker stopped (%s exported, %s failed, %s dropped)",
            self.exported_count,
            self.failure_count,
            self.dropped_count,
        )

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                with self._pending_lock:
                    self._pending.discard(item)
                self._export(item)
            finally:
                self._queue.task_done()

    def _export(self, domain_name: str):
        try:
            self._export_fn(domain_name)
            self.exported_count += 1
        except Exception:
            self.failure_count += 1
            logger.exception("Background export of domain %s failed", domain_name)
