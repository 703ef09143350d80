# drawings/dispatch.py

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from django.conf import settings
from django.db import connections

from .ingestion import ingest_file

logger = logging.getLogger(__name__)


class IngestionDispatcher:
    """
    Fire-and-forget scheduling of ingestion runs on a bounded thread pool.
    `submit()` returns immediately; at most `max_workers` runs are in flight,
    the rest wait in the executor's queue.
    """

    def __init__(self, max_workers: Optional[int] = None, runner: Callable = ingest_file):
        self.max_workers = max_workers or settings.INGESTION_MAX_WORKERS
        self._runner = runner
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="dxf-ingest",
        )
        self._running = {}
        self._lock = threading.Lock()

    def submit(self, file_path, file_id) -> Future:
        logger.info(f"[file {file_id}] Queued for ingestion (pool size {self.max_workers}).")
        return self._executor.submit(self._run, file_path, file_id)

    def running(self) -> list:
        """Ids of the files whose run is currently executing."""
        with self._lock:
            return list(self._running)

    def _run(self, file_path, file_id) -> None:
        with self._lock:
            self._running[file_id] = threading.current_thread().name
        try:
            self._runner(file_path, file_id)
        except Exception as e:
            # IngestionService never raises; this only catches a broken runner.
            logger.critical(f"[file {file_id}] Ingestion worker crashed: {e}", exc_info=True)
        finally:
            with self._lock:
                self._running.pop(file_id, None)
            # Worker threads keep their own DB connections; release them.
            connections.close_all()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_dispatcher: Optional[IngestionDispatcher] = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> IngestionDispatcher:
    """Process-wide dispatcher, created on first use."""
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = IngestionDispatcher()
        return _dispatcher
