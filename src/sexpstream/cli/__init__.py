"""
Command-line interface for sexpstream.

    sexpstream check <file>...        - Validate documents, report the first error
    sexpstream events <file>          - Dump the parse event stream
    sexpstream format <file>          - Rewrite a document in canonical layout
    sexpstream config --show|--init   - Show or create configuration

Examples:
    sexpstream check settings.sexp
    sexpstream events settings.sexp --format json
    sexpstream format settings.sexp -o settings.sexp
"""

import argparse
import sys
from typing import List, Optional

from sexpstream import __version__
from sexpstream.exceptions import ConfigError
from sexpstream.logging import enable_verbose

__all__ = ["main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sexpstream",
        description="S-expression reader and writer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"sexpstream {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report failures")
    parser.add_argument("--tab-width", type=int, help="Columns per tab in error positions")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser("check", help="Validate documents")
    check_parser.add_argument("files", nargs="+", help="Documents to check")

    events_parser = subparsers.add_parser("events", help="Dump parse events")
    events_parser.add_argument("file", help="Document to parse")
    events_parser.add_argument("--format", choices=["table", "json"], help="Output format")

    format_parser = subparsers.add_parser("format", help="Rewrite in canonical layout")
    format_parser.add_argument("file", help="Document to rewrite")
    format_parser.add_argument("-o", "--output", help="Output file (default: stdout)")

    config_parser = subparsers.add_parser("config", help="Show or create configuration")
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument("--show", action="store_true", help="Show effective configuration")
    config_group.add_argument("--init", action="store_true", help="Print a config template")
    config_group.add_argument("--paths", action="store_true", help="Show config file paths")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the sexpstream CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.verbose:
        enable_verbose("DEBUG")

    if args.tab_width is not None and args.tab_width < 1:
        parser.error("--tab-width must be positive")

    from sexpstream.cli import commands

    try:
        if args.command == "config":
            return commands.run_config(args)

        from sexpstream.config import Config

        config = Config.load()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.tab_width is not None:
        config.parser.tab_width = args.tab_width

    if args.command == "check":
        return commands.run_check(args, config)
    elif args.command == "events":
        return commands.run_events(args, config)
    elif args.command == "format":
        return commands.run_format(args, config)

    parser.print_help()
    return 1
