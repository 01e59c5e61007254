"""Tests for event recording, replay and round-tripping."""

import pytest

from sexpstream.events import (
    ATOM,
    BEGIN_LIST,
    END_LIST,
    QUOTED_ATOM,
    Event,
    WriterReplay,
    record,
    reformat,
    replay,
)
from sexpstream.exceptions import ParseError, WriteOutsideListError
from sexpstream.parser import parse
from sexpstream.writer import BufferSink, Writer


def build_document():
    """A document exercising nesting, quoting and escaping."""
    sink = BufferSink()
    w = Writer(sink)
    w.start_list("project")
    w.write_atom("v2")
    w.write_list("title", 'The "big" one')
    w.start_list("paths")
    w.write_atom("C:\\temp")
    w.write_atom("two\nlines")
    w.write_quoted_atom("plain")
    w.end_list()
    w.start_list("matrix")
    w.write_list("row", "1", "0")
    w.write_list("row", "0", "1")
    w.end_list()
    w.end_list()
    w.write_list("trailer", "+", "-", "*", "/")
    return sink.getvalue()


class TestRecord:
    """Tests for EventRecorder via record()."""

    def test_sample_document_events(self, sample_document):
        assert record(sample_document) == [
            Event(BEGIN_LIST, 0, b"config"),
            Event(BEGIN_LIST, 1, b"name"),
            Event(QUOTED_ATOM, 2, b"demo app"),
            Event(END_LIST, 1),
            Event(BEGIN_LIST, 1, b"size"),
            Event(ATOM, 2, b"3"),
            Event(ATOM, 2, b"4"),
            Event(END_LIST, 1),
            Event(BEGIN_LIST, 1, b"tags"),
            Event(ATOM, 2, b"a"),
            Event(ATOM, 2, b"b"),
            Event(ATOM, 2, b"c"),
            Event(END_LIST, 1),
            Event(END_LIST, 0),
        ]

    def test_layout_does_not_change_events(self, sample_document, messy_document):
        assert record(messy_document) == record(sample_document)

    def test_record_raises_on_error(self):
        with pytest.raises(ParseError):
            record(b"(a")

    def test_event_to_dict(self):
        assert Event(BEGIN_LIST, 0, b"a").to_dict() == {
            "event": "begin_list",
            "depth": 0,
            "value": "a",
        }
        assert Event(END_LIST, 0).to_dict() == {"event": "end_list", "depth": 0}


class TestRoundTrip:
    """Writer output parsed and replayed through a writer is byte-identical."""

    def test_sample_document(self, sample_document):
        assert reformat(sample_document) == sample_document

    def test_escaping_and_nesting(self):
        document = build_document()
        assert reformat(document) == document

    def test_replay_recorded_events(self):
        document = build_document()
        sink = BufferSink()
        replay(record(document), Writer(sink))
        assert sink.getvalue() == document

    def test_quoted_plain_atom_stays_quoted(self):
        assert b'"plain"' in reformat(build_document())

    def test_messy_layout_is_canonicalized(self, sample_document, messy_document):
        assert reformat(messy_document) == sample_document

    def test_reformat_is_idempotent(self):
        once = reformat(b"(a   (b  c)\n\n (d \"e f\"))")
        assert once == b'(a\n\t(b c)\n\t(d "e f"))'
        assert reformat(once) == once

    def test_writer_replay_handler(self):
        sink = BufferSink()
        parse(b"(x (y z))", WriterReplay(Writer(sink)))
        assert sink.getvalue() == b"(x\n\t(y z))"


class TestReplayLimits:
    """Inputs that have no writer equivalent."""

    def test_empty_list_cannot_be_replayed(self):
        with pytest.raises(WriteOutsideListError):
            reformat(b"()")

    def test_headless_list_cannot_be_replayed(self):
        with pytest.raises(WriteOutsideListError):
            reformat(b'("x")')

    def test_unknown_event_kind(self):
        with pytest.raises(ValueError, match="Unknown event kind"):
            replay([Event("comment", 0, b"x")], Writer(BufferSink()))
