"""
Character classes and position tracking shared by the parser and the writer.

Atom characters are ASCII letters, digits and ``+ - * /``. Whitespace is
space, newline and tab. Both sides of the library use these same tests, so
anything the writer emits unquoted is read back as a single atom.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TAB_WIDTH = 8

ATOM_CHARS = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ" b"abcdefghijklmnopqrstuvwxyz" b"0123456789" b"+-*/"
)
WHITESPACE = frozenset(b" \n\t")

LPAREN = ord("(")
RPAREN = ord(")")
QUOTE = ord('"')
BACKSLASH = ord("\\")
NEWLINE = ord("\n")
TAB = ord("\t")


def is_atom_char(c: int) -> bool:
    """True if byte ``c`` may appear in an unquoted atom."""
    return c in ATOM_CHARS


def is_whitespace(c: int) -> bool:
    """True if byte ``c`` separates tokens."""
    return c in WHITESPACE


def is_atom(data: bytes) -> bool:
    """True if ``data`` is a non-empty run of atom characters."""
    return bool(data) and all(c in ATOM_CHARS for c in data)


def escape(data: bytes) -> bytes:
    """Prefix every backslash and double quote with a backslash."""
    return data.replace(b"\\", b"\\\\").replace(b'"', b'\\"')


def unescape(raw: bytes) -> bytes:
    """
    Strip escaping backslashes from the body of a quoted atom.

    The byte after a backslash is always taken literally, so ``\\n`` is an
    ``n``, not a newline. The result is never longer than ``raw``.
    """
    out = bytearray(len(raw))
    n = 0
    i = 0
    end = len(raw)
    while i < end:
        if raw[i] == BACKSLASH:
            i += 1
            if i == end:
                break
        out[n] = raw[i]
        n += 1
        i += 1
    return bytes(out[:n])


@dataclass
class Position:
    """
    1-based line/column cursor.

    ``advance`` is called with each byte as it is consumed. A newline starts
    a new line at column 1, a tab moves ``tab_width`` columns, and any other
    byte moves one column.
    """

    line: int = 1
    column: int = 1
    tab_width: int = DEFAULT_TAB_WIDTH

    def advance(self, c: int) -> None:
        if c == NEWLINE:
            self.line += 1
            self.column = 1
        elif c == TAB:
            self.column += self.tab_width
        else:
            self.column += 1

    def snapshot(self) -> tuple[int, int]:
        return self.line, self.column
