from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Provides centralized access to application-wide constants: versioning,
cache file naming, treemap geometry defaults, progress throttling and the
file-type category table used by presentation helpers.
"""

from typing import Dict, FrozenSet

APP_NAME = "Skimap"
CURRENT_VERSION = "0.1.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# CACHE
# -----------------------------------------------------------------------------
CACHE_FILE_SUFFIX = ".skimap.json"

# FNV-1a (64-bit) parameters used to derive cache file names
FNV_OFFSET_BASIS = 14695981039346656037
FNV_PRIME = 1099511628211
FNV_MASK = 0xFFFFFFFFFFFFFFFF

# -----------------------------------------------------------------------------
# SCANNER
# -----------------------------------------------------------------------------
PROGRESS_REPORT_INTERVAL = 200

# POSIX st_blocks are always counted in 512-byte units
STAT_BLOCK_SIZE = 512

# -----------------------------------------------------------------------------
# TREEMAP LAYOUT
# -----------------------------------------------------------------------------
DEFAULT_MAX_DEPTH = 4
HEADER_MAX_HEIGHT = 18.0
HEADER_HEIGHT_RATIO = 0.15
MIN_TILE_EXTENT = 1.0
MIN_BODY_EXTENT = 2.0

# -----------------------------------------------------------------------------
# FILE TYPE CATEGORIES
# -----------------------------------------------------------------------------
DIRECTORY_CATEGORY = "directory"
DEFAULT_CATEGORY = "other"

FILE_CATEGORIES: Dict[str, FrozenSet[str]] = {
    "video": frozenset({"mp4", "mov", "avi", "mkv", "m4v", "wmv", "flv", "webm"}),
    "audio": frozenset({"mp3", "aac", "flac", "wav", "m4a", "ogg", "wma"}),
    "image": frozenset({"jpg", "jpeg", "png", "gif", "heic", "webp", "bmp", "tiff", "svg"}),
    "archive": frozenset({"zip", "tar", "gz", "bz2", "xz", "7z", "rar", "dmg", "pkg"}),
    "document": frozenset({"pdf"}),
    "office": frozenset({
        "doc", "docx", "xls", "xlsx", "ppt", "pptx", "pages", "numbers", "key"
    }),
    "source": frozenset({
        "swift", "py", "js", "ts", "go", "rs", "cpp", "c", "h", "java", "kt", "rb"
    }),
    "binary": frozenset({"app", "framework", "dylib", "o", "a"}),
    "database": frozenset({"sqlite", "db", "sql"}),
}
