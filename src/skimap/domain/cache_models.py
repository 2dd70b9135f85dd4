from __future__ import annotations

"""
Cache Domain Data Models.

Defines the persisted record of a scan and the lightweight descriptor
handed to front-ends when a cached tree is shown in place of a fresh scan.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from skimap.domain.tree_models import FileNode
from skimap.utils.formatting import describe_age


@dataclass(frozen=True)
class CacheRecord:
    """
    One scan persisted to one cache file.

    Attributes:
        scanned_path: Path that was scanned (the cache key source).
        scan_date: Timezone-aware timestamp of the save.
        root: Root of the size tree.
    """
    scanned_path: str
    scan_date: datetime
    root: FileNode

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scannedPath": self.scanned_path,
            "scanDate": self.scan_date.isoformat(),
            "root": self.root.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> CacheRecord:
        """
        Decode a record produced by to_dict.

        Raises:
            KeyError, TypeError, ValueError: If the payload is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a record object, received {type(data).__name__}")

        scanned_path = data["scannedPath"]
        if not isinstance(scanned_path, str):
            raise TypeError("Field 'scannedPath' must be a string")

        scan_date = datetime.fromisoformat(data["scanDate"])
        if scan_date.tzinfo is None:
            scan_date = scan_date.replace(tzinfo=timezone.utc)

        return cls(
            scanned_path=scanned_path,
            scan_date=scan_date,
            root=FileNode.from_dict(data["root"]),
        )


@dataclass(frozen=True)
class CacheInfo:
    """Descriptor of a cached tree currently being shown."""
    node: FileNode
    date: datetime
    path: str

    def age_description(self, now: Optional[datetime] = None) -> str:
        return describe_age(self.date, now)
