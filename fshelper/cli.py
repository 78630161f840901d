"""
FSHelper Command Line Interface.

Thin front end over FileSystemHelper.
Requires Python 3.11+.

Usage:
    fshelper ls src --ext py --levels 2 --files
    fshelper cat config.json --json
    fshelper watch logs/ --recursive
    fshelper exec git status --short
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from fshelper.helper.file_system_helper import FileSystemHelper
from fshelper.helper.models import StatChange, WatchEvent
from fshelper.utils.config import get_settings
from fshelper.utils.logger import configure_logging, get_logger

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fshelper",
        description="Path-scoped file system helper",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Resolve every path against this directory (default: $FSHELPER_ROOT_PATH)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="List a directory")
    ls.add_argument("path", nargs="?", default=".")
    ls.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Accepted file extension (repeatable)",
    )
    ls.add_argument(
        "--levels",
        type=int,
        default=0,
        help="Number of directory levels to expand",
    )
    kinds = ls.add_mutually_exclusive_group()
    kinds.add_argument("--files", action="store_true", help="Only list files")
    kinds.add_argument("--dirs", action="store_true", help="Only list directories")

    cat = commands.add_parser("cat", help="Print a file")
    cat.add_argument("path")
    cat.add_argument("--json", action="store_true", help="Parse as JSON and pretty-print")

    watch = commands.add_parser("watch", help="Wait for the first change and print it")
    watch.add_argument("path")
    watch.add_argument("--file", action="store_true", help="Poll a single file instead of a directory")
    watch.add_argument("--interval", type=int, default=None, help="Polling interval in ms (with --file)")
    watch.add_argument("--recursive", action="store_true", help="Include subdirectories")

    execute = commands.add_parser("exec", help="Run a command and print its stdout lines")
    execute.add_argument("cmd")
    execute.add_argument("args", nargs=argparse.REMAINDER)

    return parser


async def _watch(helper: FileSystemHelper, args: argparse.Namespace) -> WatchEvent | StatChange:
    if args.file:
        handle = helper.watch_file(args.path, interval_ms=args.interval)
    else:
        handle = helper.watch_dir(args.path, recursive=args.recursive)
    try:
        return await handle
    finally:
        await handle.abort()


def _run(helper: FileSystemHelper, args: argparse.Namespace) -> None:
    if args.command == "ls":
        entries = helper.read_dir_sync(
            args.path,
            accept_extensions=args.ext,
            recursive_levels=args.levels,
            only_files=args.files,
            only_dirs=args.dirs,
        )
        for entry in entries:
            print(f"{entry.name}/" if entry.is_dir() else entry.name)

    elif args.command == "cat":
        if args.json:
            print(json.dumps(helper.read_json_sync(args.path), indent=2, ensure_ascii=False))
        else:
            sys.stdout.write(helper.read_text_sync(args.path))

    elif args.command == "watch":
        result = asyncio.run(_watch(helper, args))
        if isinstance(result, WatchEvent):
            print(f"{result.event} {result.filename}")
        else:
            previous = result.previous.st_mtime if result.previous else None
            current = result.current.st_mtime if result.current else None
            print(f"changed mtime {previous} -> {current}")

    elif args.command == "exec":
        for line in asyncio.run(helper.execute(args.cmd, args.args)):
            print(line)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the fshelper console script."""
    configure_logging()
    args = _build_parser().parse_args(argv)

    root = args.root or get_settings().root_path
    helper = FileSystemHelper(root)
    logger.debug("command_started", command=args.command, root=str(root) if root else None)

    try:
        _run(helper, args)
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
