from __future__ import annotations

"""
Disk Usage Scanning Service.

Walks a directory subtree depth-first and builds a size tree bottom-up:
children are fully resolved before their parent node is constructed.
The walk is best-effort: unreadable directories become empty nodes and
unreadable files become zero-sized leaves. Only an inaccessible root aborts
the scan. Cancellation is cooperative and checked once per visited node;
a cancelled scan discards everything it has built so far.
"""

import logging
import os
import stat
import threading
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from skimap.domain import constants as const
from skimap.domain.scan_models import (
    EntryOutcome,
    ScanResult,
    create_cancelled_result,
    create_failure_result,
    create_success_result,
)
from skimap.domain.tree_models import FileNode
from skimap.infra.fs import normalize_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


# ==============================================================================
# PUBLIC API
# ==============================================================================

def scan_directory(
        root_path: str,
        progress_callback: Optional[ProgressCallback] = None,
        cancellation_event: Optional[threading.Event] = None,
) -> ScanResult:
    """
    Scan ``root_path`` and aggregate allocated sizes into a FileNode tree.

    The root itself is resolved through symbolic links; every entry below it
    is inspected without following links, so directory links are recorded as
    leaves and can neither loop nor be counted twice.

    Args:
        root_path: Directory (or file) to analyze.
        progress_callback: Receives the running count of visited nodes after
                           every node. Wrap it with throttle_progress to
                           coalesce updates.
        cancellation_event: When set, the scan stops at the next node.

    Returns:
        ScanResult: COMPLETED with the tree, CANCELLED, or FAILED when the
                    root cannot be read.
    """
    root_abs = normalize_path(root_path, os.getcwd())
    logger.info(f"Scan started: {root_abs}")

    try:
        root_stat = os.stat(root_abs)
    except OSError as e:
        msg = f"Cannot access '{root_abs}': {e.strerror or e}"
        logger.warning(msg)
        return create_failure_result(root_abs, msg)

    builder = _TreeBuilder(progress_callback, cancellation_event)

    if stat.S_ISDIR(root_stat.st_mode):
        listing = _read_directory(root_abs)
        if listing.outcome is not EntryOutcome.OK:
            msg = f"Cannot read directory '{root_abs}': {listing.error}"
            logger.warning(msg)
            return create_failure_result(root_abs, msg)
        root = builder.build_directory(root_abs, _display_name(root_abs), listing)
    else:
        root = builder.build_file(root_abs, _display_name(root_abs), root_stat)

    if root is None:
        logger.info(f"Scan cancelled after {builder.visited} items: {root_abs}")
        return create_cancelled_result(root_abs, builder.visited)

    logger.info(f"Scan finished: {builder.visited} items, {root.total_size} bytes allocated.")
    return create_success_result(root_abs, root, builder.visited)


def throttle_progress(
        callback: ProgressCallback,
        every: int = const.PROGRESS_REPORT_INTERVAL,
) -> ProgressCallback:
    """
    Wrap a progress sink so it only fires on every ``every``-th count.

    Args:
        callback: The sink to protect from high-frequency updates.
        every: Reporting interval in visited nodes (values below 1 mean 1).

    Returns:
        ProgressCallback: A sink suitable for scan_directory.
    """
    interval = max(1, int(every))

    def _throttled(count: int) -> None:
        if count % interval == 0:
            callback(count)

    return _throttled


# ==============================================================================
# TREE CONSTRUCTION
# ==============================================================================

class _DirectoryListing(NamedTuple):
    entries: List[os.DirEntry]
    outcome: EntryOutcome
    error: str = ""


class _PendingDirectory(NamedTuple):
    """A directory whose children are still being built."""
    path: str
    name: str
    entries: Iterator[os.DirEntry]
    children: List[FileNode]


class _TreeBuilder:
    """
    Post-order builder shared by one scan call.

    Directories are walked with an explicit stack of pending directories, so
    the depth of the scanned tree is not bounded by the interpreter's
    recursion limit. Every build method returns None once cancellation has
    been observed.
    """

    def __init__(
            self,
            progress_callback: Optional[ProgressCallback],
            cancellation_event: Optional[threading.Event],
    ) -> None:
        self._progress = progress_callback
        self._cancel = cancellation_event
        self.visited = 0

    def _is_cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def _mark_visited(self) -> None:
        self.visited += 1
        if self._progress is not None:
            self._progress(self.visited)

    # -------------------------------------------------------------------------

    def build_directory(
            self,
            path: str,
            name: str,
            listing: Optional[_DirectoryListing] = None,
    ) -> Optional[FileNode]:
        if self._is_cancelled():
            return None

        stack: List[_PendingDirectory] = [self._open_directory(path, name, listing)]
        while stack:
            if self._is_cancelled():
                return None

            pending = stack[-1]
            entry = next(pending.entries, None)

            if entry is None:
                # All children built: the directory itself is complete
                stack.pop()
                node = FileNode(
                    path=pending.path,
                    name=pending.name,
                    is_directory=True,
                    allocated_size=0,
                    children=pending.children,
                )
                self._mark_visited()
                if not stack:
                    return node
                stack[-1].children.append(node)
                continue

            is_link, is_dir = _classify_entry(entry)
            if is_dir:
                stack.append(self._open_directory(entry.path, entry.name))
                continue

            leaf = self._build_leaf(entry, is_link)
            if leaf is None:
                return None
            pending.children.append(leaf)

        return None

    def build_file(
            self,
            path: str,
            name: str,
            st: Optional[os.stat_result],
            follow_platform: bool = True,
    ) -> Optional[FileNode]:
        if self._is_cancelled():
            return None

        size = _allocated_size(path, st, follow_platform)
        node = FileNode(path=path, name=name, is_directory=False, allocated_size=size)
        self._mark_visited()
        return node

    def _open_directory(
            self,
            path: str,
            name: str,
            listing: Optional[_DirectoryListing] = None,
    ) -> _PendingDirectory:
        if listing is None:
            listing = _read_directory(path)
        if listing.outcome is EntryOutcome.TOLERATED_EMPTY:
            logger.debug(f"Unreadable directory recorded as empty: {path} ({listing.error})")
        return _PendingDirectory(path, name, iter(listing.entries), [])

    def _build_leaf(self, entry: os.DirEntry, is_link: bool) -> Optional[FileNode]:
        st: Optional[os.stat_result]
        try:
            st = entry.stat(follow_symlinks=False)
        except OSError as e:
            logger.debug(f"Cannot stat entry {entry.path}: {e}")
            st = None

        # Links are measured on their own, never through their target
        return self.build_file(entry.path, entry.name, st, follow_platform=not is_link)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _classify_entry(entry: os.DirEntry) -> Tuple[bool, bool]:
    """Return (is_link, is_directory) without following links."""
    try:
        is_link = entry.is_symlink()
        is_dir = not is_link and entry.is_dir(follow_symlinks=False)
    except OSError as e:
        logger.debug(f"Cannot classify entry {entry.path}: {e}")
        return False, False
    return is_link, is_dir


def _read_directory(path: str) -> _DirectoryListing:
    """List a directory, degrading to an empty listing on any OS error."""
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        return _DirectoryListing([], EntryOutcome.TOLERATED_EMPTY, str(e.strerror or e))
    return _DirectoryListing(entries, EntryOutcome.OK)


def _allocated_size(path: str, st: Optional[os.stat_result], follow_platform: bool) -> int:
    """
    Resolve the on-disk size of an entry.

    Preference order: block allocation reported by stat, the platform's
    allocated-size API, the logical size, and finally 0.
    """
    if st is not None:
        blocks = getattr(st, "st_blocks", None)
        if blocks is not None:
            return int(blocks) * const.STAT_BLOCK_SIZE

    if follow_platform:
        platform_size = _platform_allocated_size(path)
        if platform_size is not None:
            return platform_size

    if st is not None:
        return max(0, int(st.st_size))
    return 0


def _platform_allocated_size(path: str) -> Optional[int]:
    """Query Windows for the allocated size of a file; None elsewhere or on error."""
    if os.name != "nt":
        return None

    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
    get_size = kernel32.GetCompressedFileSizeW
    get_size.argtypes = [wintypes.LPCWSTR, ctypes.POINTER(wintypes.DWORD)]
    get_size.restype = wintypes.DWORD

    high = wintypes.DWORD(0)
    low = get_size(path, ctypes.byref(high))
    if low == 0xFFFFFFFF and ctypes.get_last_error() != 0:
        return None
    return (high.value << 32) + low


def _display_name(path: str) -> str:
    name = os.path.basename(path.rstrip("/\\"))
    return name or path
