"""
Incremental S-expression writer.

The writer emits text as it is told to, enforcing the same grammar the
parser accepts: list names must be plain atoms, atoms may only appear inside
a list, and quoted atoms are escaped so they read back unchanged.

Nested lists start on a new line indented with one tab per level:

    w = Writer(sink)
    w.start_list("config")
    w.write_list("name", "demo")
    w.write_list("size", "3", "4")
    w.end_list()

produces::

    (config
    \t(name demo)
    \t(size 3 4))

Errors latch: after the first failure every further call raises
``WriterPoisonedError`` and nothing more reaches the sink.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, NoReturn, Optional, Union

from .exceptions import (
    InvalidAtomNameError,
    InvalidListNameError,
    SinkFailureError,
    WriteOutsideListError,
    WriterError,
    WriterPoisonedError,
)
from .grammar import escape, is_atom

logger = logging.getLogger(__name__)

Text = Union[str, bytes, bytearray, memoryview]

# A sink receives each chunk of output; a truthy return (or OSError) is a failure
Sink = Callable[[bytes], Optional[bool]]


def _to_bytes(value: Text) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class BufferSink:
    """Sink that collects output in memory."""

    def __init__(self) -> None:
        self.buffer = bytearray()

    def __call__(self, data: bytes) -> None:
        self.buffer += data

    def getvalue(self) -> bytes:
        return bytes(self.buffer)


def stream_sink(stream: BinaryIO) -> Sink:
    """Adapt a binary file object to the sink interface."""

    def write(data: bytes) -> bool:
        written = stream.write(data)
        # Raw (unbuffered) streams may accept fewer bytes than offered
        return written is not None and written != len(data)

    return write


class Writer:
    """
    Stateful emitter for one output document.

    Attributes:
        depth: Number of lists currently open
        error: The first error raised, or None while the writer is healthy
    """

    def __init__(self, sink: Sink):
        self._sink = sink
        self.depth = 0
        self.error: Optional[WriterError] = None

    @property
    def failed(self) -> bool:
        """True once any operation has failed."""
        return self.error is not None

    def start_list(self, name: Text) -> None:
        """Open a list named ``name`` on a new, indented line."""
        self._check("start_list")
        data = _to_bytes(name)
        if not is_atom(data):
            self._latch(
                InvalidListNameError(
                    f"Invalid list name {data!r}",
                    "start_list",
                    context={"name": data},
                    suggestions=["List names must be non-empty and use only A-Z a-z 0-9 + - * /"],
                )
            )
        indent = b"\n" + b"\t" * self.depth if self.depth > 0 else b""
        self._emit(indent + b"(" + data, "start_list")
        self.depth += 1

    def write_atom(self, atom: Text, *, auto_quote: bool = True) -> None:
        """
        Write an atom, quoting it only if it needs quoting.

        With ``auto_quote=False`` an atom that needs quoting is rejected with
        ``InvalidAtomNameError`` instead.
        """
        self._check("write_atom")
        self._require_open_list("write_atom")
        data = _to_bytes(atom)
        if is_atom(data):
            self._emit(b" " + data, "write_atom")
        elif auto_quote:
            self.write_quoted_atom(data)
        else:
            self._latch(
                InvalidAtomNameError(
                    f"Atom {data!r} cannot be written unquoted",
                    "write_atom",
                    context={"atom": data},
                    suggestions=["Use write_quoted_atom() or allow auto_quote"],
                )
            )

    def write_quoted_atom(self, atom: Text) -> None:
        """Write ``atom`` in double quotes, escaping ``\\`` and ``\"``."""
        self._check("write_quoted_atom")
        self._require_open_list("write_quoted_atom")
        self._emit(b' "' + escape(_to_bytes(atom)) + b'"', "write_quoted_atom")

    def end_list(self) -> None:
        """Close the innermost open list."""
        self._check("end_list")
        self._require_open_list("end_list")
        self._emit(b")", "end_list")
        self.depth -= 1

    def write_list(self, name: Text, *atoms: Text) -> None:
        """Write ``(name atom...)`` in one call; stops at the first failure."""
        self.start_list(name)
        for atom in atoms:
            self.write_atom(atom)
        self.end_list()

    def _check(self, operation: str) -> None:
        if self.error is not None:
            raise WriterPoisonedError(
                "Writer is unusable after an earlier failure",
                operation,
                context={"first_error": self.error.message},
            ) from self.error

    def _require_open_list(self, operation: str) -> None:
        if self.depth == 0:
            self._latch(
                WriteOutsideListError(
                    "No list is open",
                    operation,
                    suggestions=["Call start_list() first"],
                )
            )

    def _emit(self, data: bytes, operation: str) -> None:
        try:
            failed = self._sink(data)
        except Exception as e:
            # Closed streams raise ValueError, not OSError
            self._latch(SinkFailureError(f"Output sink raised: {e}", operation), cause=e)
        if failed:
            self._latch(SinkFailureError("Output sink reported a failure", operation))

    def _latch(self, error: WriterError, cause: Optional[BaseException] = None) -> NoReturn:
        self.error = error
        logger.debug("Writer failed in %s: %s", error.operation, error.message)
        raise error from cause
