from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, persistent storage and command-line overrides), the cache-first
scan, treemap layout computation and result rendering.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from skimap.core.layout.treemap import layout
from skimap.core.services.cache import ScanCacheService
from skimap.core.services.session import ScanSession
from skimap.core.services.validator import validate_config
from skimap.domain.config import get_default_config, load_config, save_config
from skimap.domain.layout_models import Rect, Tile
from skimap.domain.scan_models import ScanStatus
from skimap.domain.tree_models import FileNode
from skimap.infra.fs import normalize_path
from skimap.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from skimap.interface.cli import args as cli_args
from skimap.utils.formatting import classify_extension, format_size

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2
EXIT_CANCELLED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 1. Configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    # 2. Logging bootstrap (console and rotating file)
    configure_logging(LoggingConfig(level=conf["log_level"], console=True, log_file=get_default_log_path()))
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config:
        save_config(conf)
        logger.info("Effective configuration saved.")

    cache = ScanCacheService()

    if args.purge_cache:
        removed = cache.purge_all()
        print(f"Removed {removed} cached scan(s) from {cache.cache_dir}")
        return EXIT_OK

    # 3. Pre-flight input verification
    target = normalize_path(args.path, os.getcwd())
    if not os.path.exists(target):
        msg = f"Path does not exist: {target}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if args.invalidate:
        cache.invalidate(target)
        print(f"Cache cleared for {target}")
        return EXIT_OK

    # 4. Scan (or cache restore)
    show_progress = not args.json_output and sys.stderr.isatty()
    session = ScanSession(
        cache,
        use_cache=conf["use_cache"],
        progress_interval=conf["progress_interval"],
        on_update=_print_progress if show_progress else None,
    )

    try:
        session.prepare_to_scan(target, force_rescan=bool(args.rescan))
        while not session.wait(0.2):
            pass
    except KeyboardInterrupt:
        session.cancel()
        session.wait()
        print("\nScan interrupted.", file=sys.stderr)
        return EXIT_CANCELLED
    finally:
        # Flush the pending cache write before the process exits
        cache.close(wait=True)

    if show_progress:
        print("", file=sys.stderr)

    result = session.last_result
    if result is not None and result.status is ScanStatus.CANCELLED:
        print("Scan cancelled.", file=sys.stderr)
        return EXIT_CANCELLED

    if session.error or session.root_node is None:
        print(f"ERROR: {session.error or 'Scan produced no result.'}", file=sys.stderr)
        return EXIT_FAILURE

    # 5. Layout
    root = session.root_node
    viewport = Rect.of_size(conf["viewport_width"], conf["viewport_height"])
    tiles = layout(root, viewport, 0, conf["max_depth"])
    logger.debug(f"Layout produced {len(tiles)} tiles for {viewport.width}x{viewport.height}.")

    # 6. Output rendering
    if args.json_output:
        print(json.dumps(_build_json_report(session, root, tiles), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(session, root, tiles, conf)

    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge the known override keys whose value was actually given.
    """
    out = dict(base)
    keys_to_merge = [
        "viewport_width", "viewport_height", "max_depth",
        "top_entries", "use_cache", "log_level",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_progress(session: ScanSession) -> None:
    print(f"\r{session.status_message:<60}", end="", file=sys.stderr, flush=True)


def _print_human_summary(
        session: ScanSession,
        root: FileNode,
        tiles: List[Tile],
        conf: Dict[str, Any],
) -> None:
    """
    Print a terminal report of the analyzed folder.
    """
    print(f"Skimap: {root.path}")
    print(f"Total allocated: {format_size(root.total_size)} in {root.count_nodes():,} items")

    if session.cached_info is not None:
        print(f"Showing cached scan from {session.cached_info.age_description()} "
              f"(use --rescan to refresh)")

    entries = root.sorted_children[:conf["top_entries"]]
    if entries:
        print("\nLargest entries:")
        for child in entries:
            category = classify_extension(child.file_extension, child.is_directory)
            print(f"  {format_size(child.total_size):>10}  {category:<9}  {child.name}")

    print(f"\nTreemap: {len(tiles)} tiles in {conf['viewport_width']}x{conf['viewport_height']} "
          f"(max depth {conf['max_depth']})")


def _build_json_report(session: ScanSession, root: FileNode, tiles: List[Tile]) -> Dict[str, Any]:
    cached = session.cached_info
    return {
        "root": {
            "path": root.path,
            "totalSize": root.total_size,
            "items": root.count_nodes(),
        },
        "cached": None if cached is None else {
            "scanDate": cached.date.isoformat(),
            "age": cached.age_description(),
        },
        "tiles": [
            {
                "id": t.id,
                "path": t.node.path,
                "name": t.node.name,
                "isDirectory": t.node.is_directory,
                "totalSize": t.node.total_size,
                "depth": t.depth,
                "x": t.rect.x,
                "y": t.rect.y,
                "width": t.rect.width,
                "height": t.rect.height,
            }
            for t in tiles
        ],
    }


if __name__ == "__main__":
    sys.exit(main())
