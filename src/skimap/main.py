from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Bootstraps the import path when run from a source checkout, installs a
global exception hook that records fatal crashes, and delegates to the CLI.
"""

import logging
import os
import sys
import traceback
from typing import Any

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, "frozen", False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)


def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Log an unhandled exception and print its trace to stderr.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logger = logging.getLogger("skimap.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (SKIMAP)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)


sys.excepthook = global_exception_handler


def main() -> int:
    """
    Run the command line application.

    Returns:
        int: Standard process exit code.
    """
    from skimap.interface.cli.app import main as cli_main

    try:
        return cli_main()
    except Exception as e:
        global_exception_handler(type(e), e, e.__traceback__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
