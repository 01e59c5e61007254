"""Implementations of the sexpstream subcommands."""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sexpstream import config as config_module
from sexpstream.config import (
    CONFIG_FILENAMES,
    Config,
    generate_template,
    get_config_paths,
)
from sexpstream.events import Event, EventRecorder, reformat
from sexpstream.exceptions import ParseError, WriterError
from sexpstream.parser import Parser

logger = logging.getLogger(__name__)


def _consoles(config: Config) -> tuple[Console, Console]:
    no_color = not config.output.color
    return (
        Console(no_color=no_color, highlight=False, soft_wrap=True),
        Console(stderr=True, no_color=no_color, highlight=False, soft_wrap=True),
    )


def _read(path: str, err: Console) -> bytes | None:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        err.print(f"[red]Error:[/red] cannot read {escape(path)}: {escape(e.strerror or str(e))}")
        return None


def _report_parse_error(err: Console, path: str, e: ParseError) -> None:
    err.print(f"{escape(path)}:{e.line}:{e.column}: [red]{escape(e.message)}[/red]")
    for suggestion in e.suggestions:
        err.print(f"  [dim]hint: {escape(suggestion)}[/dim]")


def run_check(args: argparse.Namespace, config: Config) -> int:
    """Parse each file; exit status 1 if any of them fails."""
    out, err = _consoles(config)
    failures = 0

    for path in args.files:
        data = _read(path, err)
        if data is None:
            failures += 1
            continue
        try:
            Parser(tab_width=config.parser.tab_width).parse(data)
        except ParseError as e:
            _report_parse_error(err, path, e)
            failures += 1
            continue
        if not args.quiet:
            out.print(f"{escape(path)}: [green]OK[/green]")

    logger.debug("Checked %d file(s), %d failed", len(args.files), failures)
    return 1 if failures else 0


def run_events(args: argparse.Namespace, config: Config) -> int:
    """Print the event stream of one document."""
    out, err = _consoles(config)
    data = _read(args.file, err)
    if data is None:
        return 1

    recorder = EventRecorder()
    try:
        Parser(recorder, tab_width=config.parser.tab_width).parse(data)
    except ParseError as e:
        _report_parse_error(err, args.file, e)
        return 1

    output_format = args.format or config.output.format
    if output_format == "json":
        for event in recorder.events:
            print(json.dumps(event.to_dict()))
    else:
        out.print(_events_table(args.file, recorder.events))
    return 0


def _events_table(title: str, events: list[Event]) -> Table:
    table = Table(title=escape(title))
    table.add_column("Depth", justify="right")
    table.add_column("Event")
    table.add_column("Value")
    for event in events:
        value = event.to_dict().get("value", "")
        table.add_row(str(event.depth), event.kind, escape(value))
    return table


def run_format(args: argparse.Namespace, config: Config) -> int:
    """Rewrite a document through the writer."""
    _, err = _consoles(config)
    data = _read(args.file, err)
    if data is None:
        return 1

    try:
        text = reformat(data, tab_width=config.parser.tab_width)
    except ParseError as e:
        _report_parse_error(err, args.file, e)
        return 1
    except WriterError as e:
        err.print(f"[red]Error:[/red] {escape(args.file)} cannot be rewritten: {escape(e.message)}")
        return 1

    if args.output:
        try:
            Path(args.output).write_bytes(text + b"\n")
        except OSError as e:
            err.print(f"[red]Error:[/red] cannot write {escape(args.output)}: {escape(str(e))}")
            return 1
    else:
        sys.stdout.flush()
        sys.stdout.buffer.write(text + b"\n")
        sys.stdout.buffer.flush()
    return 0


def run_config(args: argparse.Namespace) -> int:
    """Show configuration, its paths, or a template."""
    if args.init:
        print(generate_template(), end="")
        return 0
    if args.paths:
        return _show_paths()
    return _show_config(Config.load())


def _show_config(config: Config) -> int:
    print("# Effective sexpstream configuration")
    section = None
    for key, value in config.items():
        name, field_name = key.split(".", 1)
        if name != section:
            print()
            print(f"[{name}]")
            section = name
        _print_value(field_name, value, config.get_source(key))
    return 0


def _print_value(key: str, value, source: str) -> None:
    """Print a config value with its source."""
    if isinstance(value, str):
        formatted = f'"{value}"'
    elif isinstance(value, bool):
        formatted = "true" if value else "false"
    else:
        formatted = str(value)

    source_display = Path(source).name if source != "default" else source
    print(f"{key} = {formatted}  # from: {source_display}")


def _show_paths() -> int:
    paths = get_config_paths()

    print(f"User config: {config_module.USER_CONFIG_PATH}")
    print("  Status: exists" if paths["user"] else "  Status: not found")
    print(f"Project config search: {', '.join(CONFIG_FILENAMES)}")
    if paths["project"]:
        print(f"  Found: {paths['project']}")
    else:
        print("  Status: not found")
    return 0
