#!/usr/bin/env python3
"""Entry point for makedot."""

import argparse
import sys
from pathlib import Path

from makedot.core.emitter import render_dot
from makedot.core.graph import build_graph
from makedot.core.walker import MakefileWalker
from makedot.exceptions import MakedotError
from makedot.server import setup_logging


def main():
    """Print the task graph of a Makefile as DOT."""
    parser = argparse.ArgumentParser(description="Build a cross-file task graph from Makefiles")
    parser.add_argument(
        "makefile",
        type=Path,
        nargs="?",
        default=Path("Makefile"),
        help="Path to Makefile (default: ./Makefile)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = parser.parse_args()

    # Setup logging
    setup_logging(args.log_level)

    try:
        result = MakefileWalker().walk(args.makefile)
    except MakedotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(render_dot(build_graph(result)))


if __name__ == "__main__":
    main()
