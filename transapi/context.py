"""
Application context.

AppContext owns everything with process lifetime: the configuration, the database
connection (through the DataStore) and the background export worker. It is built
once at startup, handed to the web app or CLI command, and closed on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from transapi.config import Config
from transapi.core import sync
from transapi.core.adapters import connect
from transapi.core.database import DataStore
from transapi.logger import get_logger
from transapi.web.tasks import ExportWorker

logger = get_logger(__name__)


@dataclass
class AppContext:
    config: Config
    datastore: DataStore
    export_worker: Optional[ExportWorker] = None

    @classmethod
    def create(cls, config: Config, start_worker: bool = False) -> "AppContext":
        """
        Connect to the configured database and build the data store.

        Raises:
            StorageError: If the connection or adapter setup fails
        """
        conn = connect(config.db)
        try:
            datastore = DataStore(conn, config.db.driver)
        except Exception:
            conn.close()
            raise

        context = cls(config=config, datastore=datastore)
        if start_worker:
            context.start_export_worker()
        return context

    def start_export_worker(self):
        if self.export_worker is None:
            self.export_worker = ExportWorker(self.export_domain)
        self.export_worker.start()

    def export_domain(self, name: str, output_dir=None) -> List[Path]:
        """Export one domain to output_dir (default: the configured export path)."""
        return sync.export_domain(
            self.datastore,
            name,
            output_dir or self.config.xliff.export_path,
            self.config.xliff.source_language,
        )

    def request_export(self, name: str) -> bool:
        """Queue a background re-export of a domain. No-op without a running worker."""
        if self.export_worker is None or not self.export_worker.running:
            logger.debug("No export worker running, skipping export of %s", name)
            return False
        return self.export_worker.enqueue(name)

    def close(self):
        if self.export_worker is not None:
            self.export_worker.stop()
        self.datastore.close()
        logger.debug("Application context closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
