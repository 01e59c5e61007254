"""
Streaming, callback-driven S-expression parser.

The parser walks the buffer once with a small state machine and reports
structure to a handler instead of building a tree:

    (config (name "demo") (size 3 4))

produces::

    begin_list(b"config", 0)
    begin_list(b"name", 1)
    handle_atom(b"demo", 2)      # via handle_quoted_atom
    end_list(1)
    begin_list(b"size", 1)
    handle_atom(b"3", 2)
    handle_atom(b"4", 2)
    end_list(1)
    end_list(0)

The first unquoted atom of a list names it and is reported through
``begin_list`` with the depth outside the list. An empty list ``()`` reports
only ``end_list``. Any event method returning a truthy value stops the parse
early; that is reported as ``ParseStatus.STOPPED``, not as an error.

Usage:
    from sexpstream import CallbackHandler, parse

    names = []
    parse(text, CallbackHandler(begin_list=lambda name, depth: names.append(name)))
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, NoReturn, Optional, Union

from .exceptions import (
    InvalidCharacterError,
    ParseError,
    UnbalancedParenError,
    UnterminatedAtomError,
    UnterminatedQuotedAtomError,
)
from .grammar import (
    BACKSLASH,
    DEFAULT_TAB_WIDTH,
    LPAREN,
    QUOTE,
    RPAREN,
    Position,
    is_atom_char,
    is_whitespace,
    unescape,
)

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview, str]


class ParseStatus(Enum):
    """Outcome of a parse that did not fail."""

    COMPLETE = "complete"
    STOPPED = "stopped"


class _State(Enum):
    LIST = "list"
    LIST_START = "list_start"
    ATOM = "atom"
    QUOTED_ATOM = "quoted_atom"
    ESCAPED_CHAR = "escaped_char"
    POST_ATOM = "post_atom"


class SexpHandler:
    """
    Receiver for parse events. Every method is a no-op by default.

    Subclass and override only the events you need. Return a truthy value
    from ``begin_list``, ``end_list``, ``handle_atom`` or
    ``handle_quoted_atom`` to stop parsing.
    """

    def begin_list(self, name: bytes, depth: int) -> Optional[bool]:
        return None

    def end_list(self, depth: int) -> Optional[bool]:
        return None

    def handle_atom(self, atom: bytes, depth: int) -> Optional[bool]:
        return None

    def handle_quoted_atom(self, atom: bytes, depth: int) -> Optional[bool]:
        """Called for ``"..."`` atoms with escapes removed; defaults to ``handle_atom``."""
        return self.handle_atom(atom, depth)

    def handle_error(self, line: int, column: int, char: bytes) -> None:
        return None


class CallbackHandler(SexpHandler):
    """Adapts plain callables to ``SexpHandler``; omitted callbacks are skipped."""

    def __init__(
        self,
        begin_list: Optional[Callable[[bytes, int], Optional[bool]]] = None,
        end_list: Optional[Callable[[int], Optional[bool]]] = None,
        handle_atom: Optional[Callable[[bytes, int], Optional[bool]]] = None,
        handle_error: Optional[Callable[[int, int, bytes], None]] = None,
    ):
        self._begin_list = begin_list
        self._end_list = end_list
        self._handle_atom = handle_atom
        self._handle_error = handle_error

    def begin_list(self, name: bytes, depth: int) -> Optional[bool]:
        if self._begin_list is None:
            return None
        return self._begin_list(name, depth)

    def end_list(self, depth: int) -> Optional[bool]:
        if self._end_list is None:
            return None
        return self._end_list(depth)

    def handle_atom(self, atom: bytes, depth: int) -> Optional[bool]:
        if self._handle_atom is None:
            return None
        return self._handle_atom(atom, depth)

    def handle_error(self, line: int, column: int, char: bytes) -> None:
        if self._handle_error is not None:
            self._handle_error(line, column, char)


def _as_bytes(buffer: Buffer) -> bytes:
    if isinstance(buffer, str):
        return buffer.encode("utf-8")
    if isinstance(buffer, bytes):
        return buffer
    if isinstance(buffer, (bytearray, memoryview)):
        return bytes(buffer)
    raise TypeError(f"Cannot parse object of type {type(buffer).__name__}")


class Parser:
    """
    Single-pass S-expression parser.

    A parser instance may be reused; each ``parse`` call starts from a clean
    state (depth 0, line 1, column 1).

    Args:
        handler: Event receiver (default: ignore all events)
        tab_width: Columns a tab advances the reported position
    """

    def __init__(
        self,
        handler: Optional[SexpHandler] = None,
        tab_width: int = DEFAULT_TAB_WIDTH,
    ):
        if tab_width < 1:
            raise ValueError(f"tab_width must be positive, got {tab_width}")
        self.handler = handler if handler is not None else SexpHandler()
        self.tab_width = tab_width
        self._reset()

    def _reset(self) -> None:
        self._state = _State.LIST
        self._pos = Position(tab_width=self.tab_width)
        self._depth = 0
        self._start = 0
        self._token_start = (1, 1)
        self._head = False
        self._escaped = False
        # Positions of the currently open '(' for end-of-input diagnostics
        self._open: list[tuple[int, int]] = []

    @property
    def depth(self) -> int:
        """Number of lists currently open."""
        return self._depth

    def parse(self, buffer: Buffer) -> ParseStatus:
        """
        Parse a complete document.

        Returns:
            ParseStatus.COMPLETE, or ParseStatus.STOPPED if a handler asked to stop

        Raises:
            ParseError: On the first syntax error, after ``handle_error`` has fired
        """
        data = _as_bytes(buffer)
        self._reset()
        logger.debug("Parsing %d bytes", len(data))

        for i, c in enumerate(data):
            self._pos.advance(c)
            if self._step(data, i, c):
                logger.debug("Parse stopped by handler at %d:%d", *self._pos.snapshot())
                return ParseStatus.STOPPED

        self._finish()
        logger.debug("Parse complete: %d lines", self._pos.line)
        return ParseStatus.COMPLETE

    def _step(self, data: bytes, i: int, c: int) -> bool:
        """Consume byte ``c`` at offset ``i``; True means stop requested."""
        state = self._state

        if state is _State.LIST:
            if c == LPAREN:
                self._open_list()
            elif c == RPAREN:
                return self._close_list(c)
            elif is_whitespace(c):
                pass
            elif self._depth == 0:
                self._fail(
                    InvalidCharacterError,
                    f"Unexpected {_describe(c)} outside of any list",
                    c,
                    suggestions=["Only lists may appear at the top level of a document"],
                )
            elif c == QUOTE:
                self._begin_token(_State.QUOTED_ATOM, i + 1)
            elif is_atom_char(c):
                self._begin_token(_State.ATOM, i)
            else:
                self._fail(InvalidCharacterError, f"Unexpected {_describe(c)}", c)

        elif state is _State.LIST_START:
            if c == RPAREN:
                self._state = _State.LIST
                return self._close_list(c)
            elif is_atom_char(c):
                self._begin_token(_State.ATOM, i)
                self._head = True
            elif c == QUOTE:
                # A quoted atom never names a list
                self._begin_token(_State.QUOTED_ATOM, i + 1)
            elif not is_whitespace(c):
                self._fail(
                    InvalidCharacterError,
                    f"Unexpected {_describe(c)} at start of list",
                    c,
                    suggestions=["A list must start with its name, e.g. (name ...)"],
                )

        elif state is _State.ATOM:
            if is_atom_char(c):
                return False
            if c != RPAREN and not is_whitespace(c):
                self._fail(
                    InvalidCharacterError,
                    f"Unexpected {_describe(c)} in atom",
                    c,
                    suggestions=["Quote atoms that contain other characters"],
                )
            atom = data[self._start : i]
            if self._head:
                stop = self.handler.begin_list(atom, self._depth - 1)
            else:
                stop = self.handler.handle_atom(atom, self._depth)
            self._head = False
            self._state = _State.LIST
            if stop:
                return True
            if c == RPAREN:
                return self._close_list(c)

        elif state is _State.QUOTED_ATOM:
            if c == BACKSLASH:
                self._escaped = True
                self._state = _State.ESCAPED_CHAR
            elif c == QUOTE:
                atom = data[self._start : i]
                if self._escaped:
                    atom = unescape(atom)
                self._escaped = False
                self._state = _State.POST_ATOM
                return bool(self.handler.handle_quoted_atom(atom, self._depth))

        elif state is _State.ESCAPED_CHAR:
            self._state = _State.QUOTED_ATOM

        elif state is _State.POST_ATOM:
            if c == RPAREN:
                self._state = _State.LIST
                return self._close_list(c)
            elif is_whitespace(c):
                self._state = _State.LIST
            else:
                self._fail(
                    InvalidCharacterError,
                    f"Unexpected {_describe(c)} after quoted atom",
                    c,
                    suggestions=["Separate atoms with whitespace"],
                )

        return False

    def _open_list(self) -> None:
        self._depth += 1
        self._open.append((self._pos.line, self._pos.column - 1))
        self._state = _State.LIST_START

    def _close_list(self, c: int) -> bool:
        self._depth -= 1
        if self._depth < 0:
            self._depth = 0
            self._fail(
                UnbalancedParenError,
                "Unmatched ')'",
                c,
                suggestions=["Remove the extra ')' or add the missing '('"],
            )
        self._open.pop()
        return bool(self.handler.end_list(self._depth))

    def _begin_token(self, state: _State, start: int) -> None:
        self._state = state
        self._start = start
        # The token's first byte is never a tab or newline, so it sits one column back
        self._token_start = (self._pos.line, self._pos.column - 1)

    def _finish(self) -> None:
        """Validate the state left at end of input."""
        if self._state in (_State.QUOTED_ATOM, _State.ESCAPED_CHAR):
            self._fail(
                UnterminatedQuotedAtomError,
                "Input ended inside a quoted atom",
                None,
                token=self._token_start,
                suggestions=['Add the closing \'"\''],
            )
        if self._state is _State.ATOM:
            self._fail(
                UnterminatedAtomError,
                f"Input ended inside an atom with {self._depth} list(s) open",
                None,
                token=self._token_start,
                suggestions=["Add the missing ')'"],
            )
        if self._depth != 0:
            self._fail(
                UnbalancedParenError,
                f"Input ended with {self._depth} list(s) open",
                None,
                token=self._open[-1],
                suggestions=["Add the missing ')'"],
            )

    def _fail(
        self,
        cls: type[ParseError],
        message: str,
        c: Optional[int],
        token: Optional[tuple[int, int]] = None,
        suggestions: Optional[list[str]] = None,
    ) -> NoReturn:
        line, column = self._pos.snapshot()
        char = bytes([c]) if c is not None else b"\0"
        self.handler.handle_error(line, column, char)
        logger.debug("Parse error at %d:%d: %s", line, column, message)
        token_line, token_column = token if token is not None else (None, None)
        raise cls(
            message,
            line=line,
            column=column,
            char=char,
            token_line=token_line,
            token_column=token_column,
            suggestions=suggestions,
        )


def _describe(c: int) -> str:
    if 0x20 < c < 0x7F:
        return f"character {chr(c)!r}"
    return f"byte 0x{c:02x}"


def parse(
    buffer: Buffer,
    handler: Optional[SexpHandler] = None,
    *,
    tab_width: int = DEFAULT_TAB_WIDTH,
) -> ParseStatus:
    """Parse ``buffer``, reporting events to ``handler``."""
    return Parser(handler, tab_width=tab_width).parse(buffer)
