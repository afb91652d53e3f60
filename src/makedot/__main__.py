#!/usr/bin/env python3
"""Entry point for makedot."""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from makedot.core.emitter import render_dot
from makedot.core.graph import build_graph
from makedot.core.walker import MakefileWalker
from makedot.exceptions import MakedotError
from makedot.server import MakedotMCPServer, setup_logging

COMMANDS = ["dot", "list", "serve"]

# Options of the subcommands that take a separate value.
VALUE_OPTIONS = ("--log-level", "-o", "--output")


def _default_command(argv: list[str]) -> list[str]:
    """Insert 'dot' when the first positional argument is a path, not a command."""
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg in VALUE_OPTIONS:
            index += 2
            continue
        if arg.startswith("-"):
            index += 1
            continue
        if arg in COMMANDS:
            return argv
        return ["dot", *argv]
    return argv


def _configure(args) -> Path:
    """Apply environment overrides, set up logging and return the Makefile path."""
    setup_logging(os.getenv("MAKEDOT_LOG_LEVEL", args.log_level))
    return Path(os.getenv("MAKEDOT_MAKEFILE", str(args.makefile)))


def cmd_dot(args):
    """Print the cross-file task graph as DOT."""
    makefile_path = _configure(args)

    try:
        result = MakefileWalker().walk(makefile_path)
    except MakedotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    dot = render_dot(build_graph(result))
    if args.output:
        args.output.write_text(dot, encoding="utf-8")
    else:
        sys.stdout.write(dot)


def cmd_list(args):
    """List every parsed Makefile with its tasks and make invocations."""
    makefile_path = _configure(args)

    try:
        result = MakefileWalker().walk(makefile_path)
    except MakedotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for makefile in result.makefiles:
        print(f"{makefile.file}")
        for task_id, task in makefile.tasks.items():
            phony = " (phony)" if task.is_phony else ""
            deps = f" -> {', '.join(task.dependencies)}" if task.dependencies else ""
            print(f"  {task_id}  {task.name}{phony}{deps}")
            for external in result.externals:
                if external.source_id == task_id:
                    targets = " ".join(external.target_names) or "(default goal)"
                    print(f"      make {targets}  [{external.path}]")
        print()


def cmd_serve(args):
    """Run the MCP server."""
    makefile_path = _configure(args)

    # Validate Makefile exists
    if not makefile_path.exists():
        print(f"Error: Makefile not found: {makefile_path}", file=sys.stderr)
        sys.exit(1)

    server = MakedotMCPServer(makefile_path=makefile_path)

    try:
        asyncio.run(server.run())
    except MakedotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _add_common_arguments(parser: argparse.ArgumentParser, log_level: str) -> None:
    parser.add_argument(
        "makefile",
        type=Path,
        nargs="?",
        default=Path("Makefile"),
        help="Path to the entry Makefile or its directory (default: ./Makefile)",
    )
    parser.add_argument(
        "--log-level",
        default=log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {log_level})",
    )


def main():
    """Main entry point with subcommands."""
    parser = argparse.ArgumentParser(
        description="Build a cross-file task graph from Makefiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render the graph of ./Makefile and every Makefile it invokes
  makedot dot ./Makefile | dot -Tsvg -o tasks.svg

  # List parsed files, task IDs and make invocations
  makedot list ./Makefile

  # Run MCP server exposing the graph as tools
  makedot serve ./Makefile
        """,
    )

    # A bare path means 'dot': makedot [--log-level LEVEL] ./Makefile
    argv = _default_command(sys.argv[1:])

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dot_parser = subparsers.add_parser("dot", help="Print the task graph as Graphviz DOT")
    _add_common_arguments(dot_parser, "WARNING")
    dot_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write DOT to this file instead of stdout",
    )
    dot_parser.set_defaults(func=cmd_dot)

    list_parser = subparsers.add_parser("list", help="List parsed Makefiles and their tasks")
    _add_common_arguments(list_parser, "WARNING")
    list_parser.set_defaults(func=cmd_list)

    serve_parser = subparsers.add_parser("serve", help="Run MCP server")
    _add_common_arguments(serve_parser, "INFO")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
