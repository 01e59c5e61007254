"""
Exception hierarchy for sexpstream.

Every error carries a message plus optional context and suggestions, and
formats them consistently:

- Parser errors record where the scan stopped (line, column, offending byte)
  and where the offending token started.
- Writer errors record which operation failed; the writer latches the first
  one and refuses all further work.

Example::

    from sexpstream.exceptions import InvalidCharacterError

    raise InvalidCharacterError(
        "Unexpected character ']'",
        line=3,
        column=14,
        char=b"]",
    )
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    """Taxonomy shared by parser and writer failures."""

    UNBALANCED_PAREN = "unbalanced_paren"
    INVALID_CHARACTER = "invalid_character"
    UNTERMINATED_ATOM = "unterminated_atom"
    UNTERMINATED_QUOTED_ATOM = "unterminated_quoted_atom"
    INVALID_LIST_NAME = "invalid_list_name"
    INVALID_ATOM_NAME = "invalid_atom_name"
    WRITE_OUTSIDE_LIST = "write_outside_list"
    SINK_FAILURE = "sink_failure"
    WRITER_POISONED = "writer_poisoned"


class SexpError(Exception):
    """
    Base exception for all sexpstream errors.

    Attributes:
        message: Short description of the failure
        context: Dictionary of contextual information (line, column, ...)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ParseError(SexpError):
    """
    The input is not a well-formed document.

    ``line`` and ``column`` are where the scan stopped: the position following
    the offending byte, or the position following the last byte for
    end-of-input errors. ``token_line``/``token_column`` point at the start of
    the token that was open when the error was detected.
    """

    kind: ErrorKind = ErrorKind.INVALID_CHARACTER

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        char: bytes = b"\0",
        token_line: Optional[int] = None,
        token_column: Optional[int] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.line = line
        self.column = column
        self.char = char
        self.token_line = token_line if token_line is not None else line
        self.token_column = token_column if token_column is not None else column

        ctx: Dict[str, Any] = {"line": line, "column": column, "char": repr(char)}
        if (self.token_line, self.token_column) != (line, column):
            ctx["token_start"] = f"{self.token_line}:{self.token_column}"

        super().__init__(message, ctx, suggestions)


class InvalidCharacterError(ParseError):
    """A byte that the grammar does not allow in the current state."""

    kind = ErrorKind.INVALID_CHARACTER


class UnbalancedParenError(ParseError):
    """An unmatched ``)``, or a list still open at end of input."""

    kind = ErrorKind.UNBALANCED_PAREN


class UnterminatedAtomError(UnbalancedParenError):
    """Input ended inside an unquoted atom (and therefore inside a list)."""

    kind = ErrorKind.UNTERMINATED_ATOM


class UnterminatedQuotedAtomError(UnbalancedParenError):
    """Input ended inside a quoted atom or right after its backslash."""

    kind = ErrorKind.UNTERMINATED_QUOTED_ATOM


class WriterError(SexpError):
    """A writer operation was rejected or its output could not be delivered."""

    kind: ErrorKind = ErrorKind.SINK_FAILURE

    def __init__(
        self,
        message: str,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.operation = operation
        ctx = {"operation": operation}
        ctx.update(context or {})
        super().__init__(message, ctx, suggestions)


class InvalidListNameError(WriterError):
    """A list name is empty or contains non-atom characters."""

    kind = ErrorKind.INVALID_LIST_NAME


class InvalidAtomNameError(WriterError):
    """An unquoted atom write was requested for a value that needs quoting."""

    kind = ErrorKind.INVALID_ATOM_NAME


class WriteOutsideListError(WriterError):
    """An atom or a list close was attempted at depth 0."""

    kind = ErrorKind.WRITE_OUTSIDE_LIST


class SinkFailureError(WriterError):
    """The output sink reported a failure."""

    kind = ErrorKind.SINK_FAILURE


class WriterPoisonedError(WriterError):
    """The writer already failed once; it performs no further output."""

    kind = ErrorKind.WRITER_POISONED


class ConfigError(SexpError):
    """Configuration file is unreadable or holds invalid values."""

    pass


__all__ = [
    "ErrorKind",
    "SexpError",
    "ParseError",
    "InvalidCharacterError",
    "UnbalancedParenError",
    "UnterminatedAtomError",
    "UnterminatedQuotedAtomError",
    "WriterError",
    "InvalidListNameError",
    "InvalidAtomNameError",
    "WriteOutsideListError",
    "SinkFailureError",
    "WriterPoisonedError",
    "ConfigError",
]
