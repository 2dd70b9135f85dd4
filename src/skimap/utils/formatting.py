from __future__ import annotations

"""
Presentation Formatting Helpers.

Human-readable byte counts, cache ages and file-type categories. These are
consumed by the command line front-end only; the scanner, cache and layout
engine never depend on them.
"""

from datetime import datetime, timezone
from typing import Optional

from skimap.domain import constants as const

_SIZE_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")


def format_size(num_bytes: int) -> str:
    """
    Format a byte count using decimal (1000-based) units, as file managers do.

    Args:
        num_bytes: Non-negative byte count.

    Returns:
        str: e.g. "0 bytes", "1 byte", "999 bytes", "1.5 KB", "2.3 GB".
    """
    if num_bytes < 1000:
        return "1 byte" if num_bytes == 1 else f"{num_bytes} bytes"

    value = float(num_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        value /= 1000.0
        if value < 999.95:
            break
    return f"{value:.1f} {unit}"


def describe_age(date: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago ``date`` was, e.g. "3 min ago".

    Naive datetimes are treated as UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - date).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3_600:
        return f"{seconds // 60} min ago"
    if seconds < 86_400:
        return f"{seconds // 3_600} hr ago"
    return f"{seconds // 86_400} days ago"


def classify_extension(extension: str, is_directory: bool = False) -> str:
    """
    Map a file extension (with or without leading dot) to a coarse category.
    """
    if is_directory:
        return const.DIRECTORY_CATEGORY

    ext = extension.lower().lstrip(".")
    for category, extensions in const.FILE_CATEGORIES.items():
        if ext in extensions:
            return category
    return const.DEFAULT_CATEGORY
