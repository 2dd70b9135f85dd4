from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform resolution of the per-user data and cache directories,
path normalization, and atomic file replacement. Acts as an abstraction over
the 'os' and 'tempfile' modules to ensure uniform behavior across Windows and
Unix-like systems.
"""

import os
import tempfile
from typing import Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "Skimap"
UNIX_APP_DIR_NAME = ".skimap"
UNIX_CACHE_DIR_NAME = "skimap"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/Skimap
    - Linux/Mac: ~/.skimap

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    safe_mkdir(path)
    return os.path.abspath(path)


def get_user_cache_dir() -> str:
    """
    Resolve the directory dedicated to scan cache files.

    Standards:
    - Windows: %LOCALAPPDATA%/Skimap/Cache
    - Linux/Mac: $XDG_CACHE_HOME/skimap (defaults to ~/.cache/skimap)

    The directory is created on first use and is never part of the
    installed payload.

    Returns:
        str: Absolute path to the cache directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME, "Cache")

    if not path:
        base = os.environ.get("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
        path = os.path.join(base, UNIX_CACHE_DIR_NAME)

    safe_mkdir(path)
    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is blank.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)

# -----------------------------------------------------------------------------
# FILESYSTEM OPERATIONS API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def atomic_write_text(path: str, content: str) -> None:
    """
    Replace the content of a file so readers never observe a partial write.

    The payload is written to a temporary sibling file, flushed to disk and
    moved over the target with os.replace.

    Args:
        path: Final destination of the file.
        content: Text to persist (UTF-8).

    Raises:
        OSError: If the temporary file cannot be written or moved.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
