"""
Recording and replaying parse events.

``EventRecorder`` captures the event stream of a parse as plain data, and
``WriterReplay`` feeds a live parse straight into a ``Writer``. Together they
give the round trip used by ``reformat``:

    reformat(b'(a (b "x y"))') == b'(a\\n\\t(b "x y"))'

Documents produced by the writer reformat to themselves byte for byte.
Headless lists such as ``()`` or ``("x")`` have no writer equivalent and make
the replay fail with ``WriterError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .grammar import DEFAULT_TAB_WIDTH
from .parser import Buffer, SexpHandler, parse
from .writer import BufferSink, Writer

BEGIN_LIST = "begin_list"
END_LIST = "end_list"
ATOM = "atom"
QUOTED_ATOM = "quoted_atom"


@dataclass(frozen=True)
class Event:
    """One parse event. ``value`` is the name or atom bytes (None for end_list)."""

    kind: str
    depth: int
    value: Optional[bytes] = None

    def to_dict(self) -> dict:
        result = {"event": self.kind, "depth": self.depth}
        if self.value is not None:
            result["value"] = self.value.decode("utf-8", errors="backslashreplace")
        return result


@dataclass(frozen=True)
class ErrorReport:
    """Position reported through ``handle_error``."""

    line: int
    column: int
    char: bytes


class EventRecorder(SexpHandler):
    """Handler that appends every event to ``events``."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.error: Optional[ErrorReport] = None

    def begin_list(self, name: bytes, depth: int) -> None:
        self.events.append(Event(BEGIN_LIST, depth, name))

    def end_list(self, depth: int) -> None:
        self.events.append(Event(END_LIST, depth))

    def handle_atom(self, atom: bytes, depth: int) -> None:
        self.events.append(Event(ATOM, depth, atom))

    def handle_quoted_atom(self, atom: bytes, depth: int) -> None:
        self.events.append(Event(QUOTED_ATOM, depth, atom))

    def handle_error(self, line: int, column: int, char: bytes) -> None:
        self.error = ErrorReport(line, column, char)


class WriterReplay(SexpHandler):
    """Handler that re-emits each event through ``writer``."""

    def __init__(self, writer: Writer):
        self.writer = writer

    def begin_list(self, name: bytes, depth: int) -> None:
        self.writer.start_list(name)

    def end_list(self, depth: int) -> None:
        self.writer.end_list()

    def handle_atom(self, atom: bytes, depth: int) -> None:
        self.writer.write_atom(atom)

    def handle_quoted_atom(self, atom: bytes, depth: int) -> None:
        self.writer.write_quoted_atom(atom)


def replay(events: Iterable[Event], writer: Writer) -> None:
    """Re-emit recorded ``events`` through ``writer``."""
    target = WriterReplay(writer)
    for event in events:
        if event.kind == BEGIN_LIST:
            target.begin_list(event.value, event.depth)
        elif event.kind == END_LIST:
            target.end_list(event.depth)
        elif event.kind == ATOM:
            target.handle_atom(event.value, event.depth)
        elif event.kind == QUOTED_ATOM:
            target.handle_quoted_atom(event.value, event.depth)
        else:
            raise ValueError(f"Unknown event kind: {event.kind!r}")


def record(buffer: Buffer, *, tab_width: int = DEFAULT_TAB_WIDTH) -> list[Event]:
    """Parse ``buffer`` and return its events."""
    recorder = EventRecorder()
    parse(buffer, recorder, tab_width=tab_width)
    return recorder.events


def reformat(buffer: Buffer, *, tab_width: int = DEFAULT_TAB_WIDTH) -> bytes:
    """Parse ``buffer`` and rewrite it in the writer's canonical layout."""
    sink = BufferSink()
    parse(buffer, WriterReplay(Writer(sink)), tab_width=tab_width)
    return sink.getvalue()
