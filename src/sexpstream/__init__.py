"""
sexpstream: a small streaming S-expression reader and writer.

The reader reports structure through callbacks instead of building a tree,
and the writer emits correctly escaped, tab-indented text that the reader
accepts back unchanged.

Modules:
    grammar: Atom/whitespace character classes and position tracking
    parser: Callback-driven parser (``parse``, ``SexpHandler``)
    writer: Incremental writer with latched errors (``Writer``)
    events: Event recording, replay and ``reformat``
    config: TOML configuration loading for the CLI
    cli: ``sexpstream`` command

Quick Start::

    from sexpstream import BufferSink, CallbackHandler, Writer, parse

    sink = BufferSink()
    w = Writer(sink)
    w.start_list("point")
    w.write_list("x", "10")
    w.write_list("label", "origin point")
    w.end_list()

    parse(sink.getvalue(), CallbackHandler(
        begin_list=lambda name, depth: print("list", name, depth),
        handle_atom=lambda atom, depth: print("atom", atom, depth),
    ))
"""

__version__ = "0.1.0"

from sexpstream.events import Event, EventRecorder, WriterReplay, record, reformat, replay
from sexpstream.exceptions import (
    ErrorKind,
    ParseError,
    SexpError,
    WriterError,
)
from sexpstream.grammar import Position, is_atom, is_atom_char, is_whitespace
from sexpstream.parser import CallbackHandler, Parser, ParseStatus, SexpHandler, parse
from sexpstream.writer import BufferSink, Writer, stream_sink

__all__ = [
    # Version
    "__version__",
    # Grammar
    "Position",
    "is_atom",
    "is_atom_char",
    "is_whitespace",
    # Parser
    "parse",
    "Parser",
    "ParseStatus",
    "SexpHandler",
    "CallbackHandler",
    # Writer
    "Writer",
    "BufferSink",
    "stream_sink",
    # Events
    "Event",
    "EventRecorder",
    "WriterReplay",
    "record",
    "replay",
    "reformat",
    # Errors
    "ErrorKind",
    "SexpError",
    "ParseError",
    "WriterError",
]
