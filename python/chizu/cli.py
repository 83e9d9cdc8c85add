"""
CLI - Command line entry point.

    chizu [directory] [-c] [-q PATTERN] [-i] [--clear | --clear-dir | --rebuild]
"""

import argparse
import asyncio
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from .cache import CacheStore
from .config import ChizuConfig
from .errors import ChizuError, TargetNotFoundError
from .pipeline import analyze_directory
from .presenter import Presenter


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chizu",
        description="High-performance repository entity mapper",
    )
    parser.add_argument("directory", nargs="?", default=".", help="Directory to map")
    parser.add_argument("--compress", "-c", action="store_true",
                        help="Compress mode (only show signatures)")
    parser.add_argument("--query", "-q", metavar="PATTERN",
                        help="Search for a specific keyword (regex)")
    parser.add_argument("--ignore-case", "-i", action="store_true",
                        help="Ignore case distinctions")

    clearing = parser.add_mutually_exclusive_group()
    clearing.add_argument("--clear", action="store_true",
                          help="Clear the whole cache and exit")
    clearing.add_argument("--clear-dir", action="store_true",
                          help="Clear cache entries under the directory and exit")
    clearing.add_argument("--rebuild", action="store_true",
                          help="Clear cache entries under the directory, then map it")

    parser.add_argument("--cache-dir", type=Path, help="Cache location (default: ~/.cache/chizu)")
    parser.add_argument("--batch-size", type=int, help="Files processed concurrently")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    # Configure logging; stdout is reserved for the outline
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ChizuConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1
    if args.cache_dir:
        config.cache_dir = args.cache_dir
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    config.__post_init__()

    try:
        presenter = Presenter(args.query, args.ignore_case, args.compress)
    except re.error as e:
        print(f"Error: invalid query pattern: {e}", file=sys.stderr)
        return 1

    try:
        with CacheStore(config.db_path) as store:
            return _run(args, config, store, presenter)
    except (ChizuError, OSError, ValueError) as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _run(
    args: argparse.Namespace,
    config: ChizuConfig,
    store: CacheStore,
    presenter: Presenter,
) -> int:
    if args.clear:
        store.clear_all()
        print("Cache cleared.")
        return 0

    target = (Path.cwd() / args.directory).resolve()

    # Entries of a deleted tree must stay clearable
    if args.clear_dir:
        removed = store.clear_subtree(target)
        print(f"Cleared {removed} cache entries under {target}.")
        return 0

    if not target.is_dir():
        raise TargetNotFoundError(target)

    if args.rebuild:
        store.clear_subtree(target)

    result = asyncio.run(analyze_directory(target, store, config))

    output = presenter.render(result)
    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
