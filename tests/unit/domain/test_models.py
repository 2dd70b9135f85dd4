from __future__ import annotations

"""
Unit tests for Scan, Layout and Cache domain models.

Verifies:
1. ScanResult factories (completed / cancelled / failed).
2. Rect geometry helpers and Tile identity.
3. CacheRecord encoding and CacheInfo age descriptions.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from skimap.domain.cache_models import CacheInfo, CacheRecord
from skimap.domain.layout_models import Rect, Tile
from skimap.domain.scan_models import (
    ScanStatus,
    create_cancelled_result,
    create_failure_result,
    create_success_result,
)
from skimap.domain.tree_models import FileNode, trees_equal


def test_success_result_carries_tree(sample_tree: FileNode) -> None:
    result = create_success_result("/root", sample_tree, visited=8)
    assert result.ok is True
    assert result.status is ScanStatus.COMPLETED
    assert result.root is sample_tree
    assert result.error == ""


def test_cancelled_result_has_no_tree() -> None:
    result = create_cancelled_result("/root", visited=3)
    assert result.cancelled is True
    assert result.ok is False
    assert result.root is None
    assert result.visited == 3


def test_failure_result_has_message() -> None:
    result = create_failure_result("/missing", "Cannot access '/missing'")
    assert result.status is ScanStatus.FAILED
    assert result.root is None
    assert "missing" in result.error


def test_scan_result_is_immutable() -> None:
    result = create_cancelled_result("/root", visited=0)
    with pytest.raises(FrozenInstanceError):
        result.visited = 5  # type: ignore[misc]


def test_rect_helpers() -> None:
    outer = Rect(0, 0, 100, 50)
    assert outer.area == 5000
    assert outer.max_x == 100 and outer.max_y == 50
    assert outer.contains(Rect(10, 10, 90, 40))
    assert not outer.contains(Rect(10, 10, 91, 40))
    assert Rect(0, 0, 1, 10).is_degenerate(1)
    assert not Rect(0, 0, 1.5, 10).is_degenerate(1)
    assert Rect.zero().area == 0


def test_tile_uses_node_identity() -> None:
    node = FileNode("/a", allocated_size=1)
    tile = Tile.for_node(node, Rect.of_size(10, 10), depth=2)
    assert tile.id == node.id
    assert tile.node is node
    assert tile.depth == 2


def test_cache_record_round_trip(sample_tree: FileNode) -> None:
    """The record's date is stored as ISO 8601 text and decoded tz-aware."""
    date = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    record = CacheRecord(scanned_path="/root", scan_date=date, root=sample_tree)

    data = record.to_dict()
    assert data["scanDate"] == "2024-05-01T12:30:00+00:00"

    decoded = CacheRecord.from_dict(data)
    assert decoded.scanned_path == "/root"
    assert decoded.scan_date == date
    assert trees_equal(decoded.root, sample_tree)


def test_cache_record_rejects_bad_date(sample_tree: FileNode) -> None:
    data = {"scannedPath": "/root", "scanDate": "yesterday", "root": sample_tree.to_dict()}
    with pytest.raises(ValueError):
        CacheRecord.from_dict(data)


def test_cache_info_age_description(sample_tree: FileNode) -> None:
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    info = CacheInfo(node=sample_tree, date=now - timedelta(minutes=3), path="/root")
    assert info.age_description(now) == "3 min ago"
