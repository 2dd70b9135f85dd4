from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
argparse namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict

from skimap.domain import constants as const

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the Skimap CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="skimap",
        description="Analyze disk usage of a folder and lay it out as a squarified treemap.",
    )

    p.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Folder to analyze (defaults to the current directory).",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {const.CURRENT_VERSION}",
    )

    # --- Treemap geometry ---
    p.add_argument("--width", dest="viewport_width", type=int, default=None,
                   help="Width of the treemap viewport.")
    p.add_argument("--height", dest="viewport_height", type=int, default=None,
                   help="Height of the treemap viewport.")
    p.add_argument("--max-depth", dest="max_depth", type=int, default=None,
                   help="Deepest directory level that is subdivided.")

    # --- Reporting ---
    p.add_argument("--top", dest="top_entries", type=int, default=None,
                   help="Number of largest entries listed in the summary.")
    p.add_argument("--json", dest="json_output", action="store_true",
                   help="Print the tree summary and tiles as JSON.")

    # --- Cache management ---
    p.add_argument("--no-cache", action="store_true",
                   help="Neither read nor write the scan cache.")
    p.add_argument("--rescan", action="store_true",
                   help="Ignore any cached result and scan again.")
    p.add_argument("--invalidate", action="store_true",
                   help="Delete the cached result of PATH and exit.")
    p.add_argument("--purge-cache", action="store_true",
                   help="Delete every cached result and exit.")

    # --- Configuration and diagnostics ---
    p.add_argument("--use-defaults", action="store_true",
                   help="Ignore the saved configuration.")
    p.add_argument("--dump-config", action="store_true",
                   help="Print the effective configuration and exit.")
    p.add_argument("--save-config", action="store_true",
                   help="Store the effective configuration as the new defaults.")
    p.add_argument("--debug", action="store_true",
                   help="Elevate logging verbosity to DEBUG.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset (None means "not given").
    """
    overrides: Dict[str, Any] = {
        "viewport_width": args.viewport_width,
        "viewport_height": args.viewport_height,
        "max_depth": args.max_depth,
        "top_entries": args.top_entries,
    }

    if args.no_cache:
        overrides["use_cache"] = False
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides
