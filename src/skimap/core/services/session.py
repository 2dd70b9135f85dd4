from __future__ import annotations

"""
Scan Session Orchestration.

Coordinates the cache-first workflow behind a front-end: look the folder up
in the cache and show it immediately on a hit, otherwise scan it in a
background daemon thread. Completed scans are published before their cache
write lands; cancelled or failed scans never touch the cache. State changes
are reported through an optional listener so any front-end (CLI, GUI) can
marshal them onto its own thread.
"""

import logging
import threading
from typing import Callable, Optional

from skimap.core.services.cache import ScanCacheService
from skimap.core.services.scanner import scan_directory, throttle_progress
from skimap.domain import constants as const
from skimap.domain.cache_models import CacheInfo
from skimap.domain.scan_models import ScanResult, ScanStatus, create_cancelled_result
from skimap.domain.tree_models import FileNode
from skimap.infra.fs import normalize_path
from skimap.utils.formatting import format_size

logger = logging.getLogger(__name__)

SessionListener = Callable[["ScanSession"], None]


class ScanSession:
    """
    Holds the state of the folder currently being analyzed.

    Attributes:
        root_node: Tree currently on display (cached or freshly scanned).
        is_scanning: True while a background scan is running.
        status_message: Short human-readable status line.
        progress: Last reported number of visited nodes.
        error: Failure message of the last scan, if any.
        cached_info: Set while the displayed tree comes from the cache.
        pending_path: Path most recently requested (used by rescan).
        last_result: Outcome of the most recent background scan.
    """

    def __init__(
            self,
            cache: Optional[ScanCacheService] = None,
            *,
            use_cache: bool = True,
            progress_interval: int = const.PROGRESS_REPORT_INTERVAL,
            on_update: Optional[SessionListener] = None,
    ) -> None:
        self.cache = cache if cache is not None else ScanCacheService()
        self.use_cache = use_cache
        self.progress_interval = progress_interval
        self.on_update = on_update

        self.root_node: Optional[FileNode] = None
        self.is_scanning = False
        self.status_message = "Choose a folder to scan"
        self.progress = 0
        self.error: Optional[str] = None
        self.cached_info: Optional[CacheInfo] = None
        self.pending_path: Optional[str] = None
        self.last_result: Optional[ScanResult] = None

        self._state_lock = threading.RLock()
        self._cancellation_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def prepare_to_scan(self, path: str, *, force_rescan: bool = False) -> None:
        """
        Show the cached tree of ``path`` if there is one, otherwise scan it.

        Ignored while a lookup or a scan is already in progress.

        Args:
            path: Folder to analyze.
            force_rescan: Skip the cache lookup and always scan.
        """
        with self._state_lock:
            if self.is_scanning:
                logger.debug("Scan request ignored: a scan is already running.")
                return
            # Reserve the session before releasing the lock
            self.is_scanning = True
            self._cancellation_event = threading.Event()
            target = normalize_path(path, path)
            self.pending_path = target
            self.root_node = None
            self.cached_info = None
            self.error = None
            self.progress = 0
            self.status_message = "Checking cache…"
        self._notify()

        try:
            cached = None
            if self.use_cache and not force_rescan:
                cached = self.cache.load(target)
        except Exception:
            with self._state_lock:
                self.is_scanning = False
            raise

        if cached is None:
            self._start_scan(target)
            return

        node, date = cached
        with self._state_lock:
            self.is_scanning = False
            self.root_node = node
            self.cached_info = CacheInfo(node=node, date=date, path=target)
            self.status_message = f"Cached • {format_size(node.total_size)}"
        logger.info(f"Showing cached scan of {target} from {date.isoformat()}")
        self._notify()

    def rescan(self) -> None:
        """Drop the displayed tree and scan ``pending_path`` afresh."""
        with self._state_lock:
            if self.pending_path is None or self.is_scanning:
                return
            self.is_scanning = True
            self._cancellation_event = threading.Event()
            self.cached_info = None
            self.root_node = None
            target = self.pending_path
        self._start_scan(target)

    def cancel(self) -> None:
        """Ask the running scan to stop at its next node."""
        with self._state_lock:
            if not self.is_scanning:
                return
            logger.info("Scan cancellation requested.")
            self._cancellation_event.set()
            self.status_message = "Cancelling…"
        self._notify()

    def dismiss_cached_info(self) -> None:
        with self._state_lock:
            self.cached_info = None
        self._notify()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the background scan finishes.

        Returns:
            bool: True if no scan is running anymore.
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
            return not worker.is_alive()
        return True

    # -------------------------------------------------------------------------
    # BACKGROUND SCAN
    # -------------------------------------------------------------------------

    def _start_scan(self, path: str) -> None:
        """Launch the worker; the caller has already reserved the session."""
        with self._state_lock:
            self.progress = 0
            self.error = None
            self.status_message = "Scanning…"
            cancellation_event = self._cancellation_event
            self._worker = threading.Thread(
                target=self._run_scan_task,
                args=(path, cancellation_event),
                name="skimap-scan",
                daemon=True,
            )
            worker = self._worker
        self._notify()
        worker.start()

    def _run_scan_task(self, path: str, cancellation_event: threading.Event) -> None:
        """Scan ``path`` on the worker thread and publish the outcome."""
        progress = throttle_progress(self._on_progress, self.progress_interval)
        try:
            result = scan_directory(path, progress, cancellation_event)
        except Exception as e:
            logger.critical(f"Scan Thread: Critical failure detected: {e}", exc_info=True)
            with self._state_lock:
                self.is_scanning = False
                self.error = str(e)
                self.status_message = f"Error: {e}"
            self._notify()
            return

        if result.ok and cancellation_event.is_set():
            logger.info("Scan Thread: Completed scan discarded due to cancellation.")
            result = create_cancelled_result(result.root_path, result.visited)

        with self._state_lock:
            self.last_result = result
            self.is_scanning = False
            self.progress = result.visited

            if result.status is ScanStatus.COMPLETED and result.root is not None:
                self.root_node = result.root
                self.cached_info = None
                self.status_message = (
                    f"{result.visited:,} items • {format_size(result.root.total_size)}"
                )
            elif result.status is ScanStatus.CANCELLED:
                self.status_message = "Cancelled"
            else:
                self.error = result.error
                self.status_message = f"Error: {result.error}"
        self._notify()

        if result.ok and result.root is not None and self.use_cache:
            self.cache.save_async(result.root, path)

    def _on_progress(self, count: int) -> None:
        with self._state_lock:
            self.progress = count
            self.status_message = f"Scanned {count:,} items…"
        self._notify()

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self)
