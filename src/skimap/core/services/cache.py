from __future__ import annotations

"""
Scan Result Cache Service.

Persists size trees to disk so that a previously analyzed folder can be
shown instantly. Each scanned path maps to exactly one JSON file whose name
is a 64-bit FNV-1a hash of the path. All operations are serialized through
a single lock and writes replace files atomically, so readers observe either
the previous or the new record. The cache is strictly best-effort: corrupted
or missing files behave as a miss and write failures are swallowed.
"""

import json
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional, Tuple

from skimap.domain import constants as const
from skimap.domain.cache_models import CacheRecord
from skimap.domain.tree_models import FileNode
from skimap.infra.fs import atomic_write_text, get_user_cache_dir

logger = logging.getLogger(__name__)


class ScanCacheService:
    """
    Manages the on-disk records of completed scans.

    One instance is the single access point to the cache directory; the
    internal lock makes it safe to share between the scanning thread, the
    background writer and the caller.
    """

    def __init__(self, cache_dir: Optional[str] = None) -> None:
        """
        Initialize the service.

        Args:
            cache_dir: Directory holding cache files. Defaults to the
                       per-user cache directory, created on first use.
        """
        self._cache_dir = cache_dir or get_user_cache_dir()
        self._lock = threading.Lock()
        self._writer: Optional[ThreadPoolExecutor] = None

    @property
    def cache_dir(self) -> str:
        return self._cache_dir

    # -------------------------------------------------------------------------
    # KEY DERIVATION
    # -------------------------------------------------------------------------

    @staticmethod
    def key_for(path: str) -> str:
        """
        Derive the cache key of a scan path.

        64-bit FNV-1a over the UTF-8 bytes of the path: for each byte the hash
        is XOR-ed with the byte and then multiplied by the FNV prime modulo 2^64.

        Args:
            path: Scanned path.

        Returns:
            str: 16 lowercase hexadecimal digits.
        """
        h = const.FNV_OFFSET_BASIS
        for byte in path.encode("utf-8"):
            h ^= byte
            h = (h * const.FNV_PRIME) & const.FNV_MASK
        return f"{h:016x}"

    def cache_file_for(self, path: str) -> str:
        return os.path.join(self._cache_dir, self.key_for(path) + const.CACHE_FILE_SUFFIX)

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def load(self, path: str) -> Optional[Tuple[FileNode, datetime]]:
        """
        Retrieve the cached tree of ``path``.

        Args:
            path: Scanned path used as the key.

        Returns:
            Optional[Tuple[FileNode, datetime]]: The tree and the time it was
            saved, or None on a miss (absent, unreadable or corrupted file).
        """
        cache_file = self.cache_file_for(path)
        try:
            with self._lock:
                with open(cache_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
            record = CacheRecord.from_dict(data)
        except FileNotFoundError:
            logger.debug(f"Cache miss for {path}")
            return None
        except (OSError, ValueError, KeyError, TypeError, RecursionError) as e:
            logger.debug(f"Unusable cache file {os.path.basename(cache_file)} treated as miss: {e}")
            return None

        logger.debug(f"Cache hit for {path} (saved {record.scan_date.isoformat()})")
        return record.root, record.scan_date

    def save(self, node: FileNode, path: str) -> None:
        """
        Store ``node`` as the cached tree of ``path``, replacing any previous one.

        Failures are logged at debug level and otherwise ignored.
        """
        record = CacheRecord(
            scanned_path=path,
            scan_date=datetime.now(timezone.utc),
            root=node,
        )
        try:
            payload = json.dumps(record.to_dict(), ensure_ascii=False)
            with self._lock:
                os.makedirs(self._cache_dir, exist_ok=True)
                atomic_write_text(self.cache_file_for(path), payload)
        except (OSError, ValueError, RecursionError) as e:
            logger.debug(f"Cache write skipped for {path}: {e}")
            return

        logger.debug(f"Cached scan of {path} in {os.path.basename(self.cache_file_for(path))}")

    def save_async(self, node: FileNode, path: str) -> Future:
        """
        Queue a save on the background writer.

        Saves are executed one at a time in submission order.

        Returns:
            Future: Completes once the write has been attempted.
        """
        with self._lock:
            if self._writer is None:
                self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="skimap-cache")
            writer = self._writer
        return writer.submit(self.save, node, path)

    def invalidate(self, path: str) -> None:
        """Remove the cached record of ``path``; a missing file is not an error."""
        cache_file = self.cache_file_for(path)
        try:
            with self._lock:
                os.remove(cache_file)
            logger.debug(f"Cache invalidated for {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Cache invalidation failed for {path}: {e}")

    def size_of(self, path: str) -> Optional[int]:
        """Byte size of the cache file of ``path``, or None if there is none."""
        try:
            with self._lock:
                return os.path.getsize(self.cache_file_for(path))
        except OSError:
            return None

    def purge_all(self) -> int:
        """
        Delete every cache file in the cache directory.

        Returns:
            int: Number of files removed.
        """
        removed = 0
        with self._lock:
            try:
                names = os.listdir(self._cache_dir)
            except OSError:
                return 0
            for name in names:
                if not name.endswith(const.CACHE_FILE_SUFFIX):
                    continue
                try:
                    os.remove(os.path.join(self._cache_dir, name))
                    removed += 1
                except OSError as e:
                    logger.debug(f"Could not remove cache file {name}: {e}")

        logger.info(f"Cache purged: {removed} file(s) removed.")
        return removed

    def close(self, wait: bool = True) -> None:
        """Stop the background writer, optionally waiting for pending saves."""
        with self._lock:
            writer, self._writer = self._writer, None
        if writer is not None:
            writer.shutdown(wait=wait)
