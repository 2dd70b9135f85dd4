from __future__ import annotations

"""
Scan Domain Data Models.

Defines the outcome types exchanged between the scanner and its callers.
A scan produces exactly one of three results: a completed tree, a
cancellation, or a failure of the root path itself. Per-entry problems
below the root never surface here; they are absorbed by the scanner.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from skimap.domain.tree_models import FileNode

# -----------------------------------------------------------------------------
# OUTCOME ENUMERATIONS
# -----------------------------------------------------------------------------

class ScanStatus(str, Enum):
    """Terminal state of a scan call."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class EntryOutcome(str, Enum):
    """
    Result of reading a single filesystem entry.

    OK: the entry was read normally.
    TOLERATED_EMPTY: the entry could not be read and is recorded as empty/zero.
    FAILURE: the entry is the scan root and could not be read at all.
    """
    OK = "ok"
    TOLERATED_EMPTY = "tolerated_empty"
    FAILURE = "failure"

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanResult:
    """
    Immutable result of a scan call.

    Attributes:
        status: Terminal state of the scan.
        root_path: Normalized path that was scanned.
        root: The size tree; only present when status is COMPLETED.
        error: Human-readable message; only present when status is FAILED.
        visited: Number of nodes visited before the scan stopped.
    """
    status: ScanStatus
    root_path: str
    root: Optional[FileNode] = None
    error: str = ""
    visited: int = 0

    @property
    def ok(self) -> bool:
        return self.status is ScanStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status is ScanStatus.CANCELLED

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_success_result(root_path: str, root: FileNode, visited: int) -> ScanResult:
    """Create a completed scan result carrying the finished tree."""
    return ScanResult(
        status=ScanStatus.COMPLETED,
        root_path=root_path,
        root=root,
        visited=visited,
    )


def create_cancelled_result(root_path: str, visited: int) -> ScanResult:
    """Create a cancelled scan result; partial trees are never attached."""
    return ScanResult(
        status=ScanStatus.CANCELLED,
        root_path=root_path,
        visited=visited,
    )


def create_failure_result(root_path: str, error: str, visited: int = 0) -> ScanResult:
    """Create a failed scan result for an inaccessible root path."""
    return ScanResult(
        status=ScanStatus.FAILED,
        root_path=root_path,
        error=error,
        visited=visited,
    )
