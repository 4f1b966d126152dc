import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import get_settings
from .errors import DumpParseError
from .grouping import group_threads
from .parser import read_dump_file
from .report import GroupFilter, filter_groups, format_groups, parse_keywords

logger = logging.getLogger("thread_grouper_mcp")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str) -> None:
    # stdout carries the report (or the MCP stdio transport), so log to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
        force=True,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thread-grouper",
        description="Group threads of a JVM thread dump by their stack trace, ignoring lock addresses.",
    )
    parser.add_argument("-f", "--file", dest="file_name", help="Input file name")
    parser.add_argument(
        "-l", dest="max_size", type=int,
        help="Return only stack with number of threads less or equal then value passed",
    )
    parser.add_argument(
        "-g", dest="min_size", type=int,
        help="Return only stack with number of threads greater or equal then value passed",
    )
    parser.add_argument(
        "-t", dest="keywords",
        help="Return only stack with substrings passed (separated by commas)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: from THREAD_GROUPER_LOG_LEVEL)")
    parser.add_argument("--mcp", action="store_true", help="Run as an MCP server over stdio instead")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.mcp:
        from .server import serve

        serve()
        return 0

    if not args.file_name:
        parser.error("the following arguments are required: -f/--file")
    if not os.path.isfile(args.file_name):
        parser.error(f"File not found: {args.file_name}")
    if os.path.getsize(args.file_name) > settings.max_file_bytes:
        parser.error(f"File too large (>{settings.max_file_bytes} bytes): {args.file_name}")

    try:
        document = read_dump_file(args.file_name, encoding=settings.encoding)
    except DumpParseError as e:
        logger.error("Failed to parse %s: %s", args.file_name, e)
        return 1

    index = group_threads(document.threads)
    logger.info("%d threads in %d groups", len(document.threads), len(index))
    group_filter = GroupFilter(
        max_size=args.max_size,
        min_size=args.min_size,
        keywords=parse_keywords(args.keywords),
    )
    sys.stdout.write(format_groups(filter_groups(index, group_filter)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
