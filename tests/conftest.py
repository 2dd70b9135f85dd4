from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures: a small on-disk folder to scan, hand-built size trees
   and a cache service confined to a temporary directory.
"""

import os
import sys
from pathlib import Path

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from skimap.core.services.cache import ScanCacheService  # noqa: E402
from skimap.domain.tree_models import FileNode  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_folder(tmp_path: Path) -> Path:
    """
    Create a small folder hierarchy on disk.

    Structure:
    /project
      README.md
      /src
        main.py
        /pkg
          big.bin
      /empty
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "README.md").write_text("# Project\n" * 50, encoding="utf-8")

    src = root / "src"
    src.mkdir()
    (src / "main.py").write_text("print('hello')\n" * 200, encoding="utf-8")

    pkg = src / "pkg"
    pkg.mkdir()
    (pkg / "big.bin").write_bytes(b"\x00\x01" * 40_000)

    (root / "empty").mkdir()
    return root


@pytest.fixture
def sample_tree() -> FileNode:
    """
    Return a hand-built size tree with known sizes.

    /root (dir)
      docs (dir): a.txt=300, b.txt=100
      video.mp4=1000
      zero (dir): z.txt=0
      notes.txt=50
    """
    docs = FileNode(
        "/root/docs", is_directory=True,
        children=[
            FileNode("/root/docs/a.txt", allocated_size=300),
            FileNode("/root/docs/b.txt", allocated_size=100),
        ],
    )
    zero = FileNode(
        "/root/zero", is_directory=True,
        children=[FileNode("/root/zero/z.txt", allocated_size=0)],
    )
    return FileNode(
        "/root", is_directory=True,
        children=[
            docs,
            FileNode("/root/video.mp4", allocated_size=1000),
            zero,
            FileNode("/root/notes.txt", allocated_size=50),
        ],
    )


@pytest.fixture
def cache_service(tmp_path: Path) -> ScanCacheService:
    """Provide a cache service that never touches the real user cache."""
    service = ScanCacheService(cache_dir=str(tmp_path / "cache"))
    yield service
    service.close(wait=True)
