"""
Logging configuration for sexpstream.

The library logs under the ``sexpstream`` logger and is silent unless a
handler is attached, either by the application or with ``enable_verbose``.
"""

import logging
from typing import Optional, TextIO

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_logger = logging.getLogger("sexpstream")
_logger.addHandler(logging.NullHandler())

# Handler installed by enable_verbose; handlers added by applications are left alone
_verbose_handler: Optional[logging.Handler] = None


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {name}")
    return level


def enable_verbose(
    level: str = "DEBUG",
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Send sexpstream log records to ``stream`` (stderr by default).

    Calling it again replaces the earlier handler instead of adding a second.

    Args:
        level: Logging level - "DEBUG", "INFO", "WARNING", "ERROR"
        fmt: Optional custom format string
        stream: Text stream to write to

    Example:
        enable_verbose()
        parse(text, handler)   # logs parse start, stop and errors
        disable_verbose()
    """
    global _verbose_handler

    numeric = _level(level)
    disable_verbose()

    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    _logger.setLevel(numeric)
    _logger.addHandler(handler)
    _verbose_handler = handler


def disable_verbose() -> None:
    """Detach the handler installed by ``enable_verbose``."""
    global _verbose_handler

    _logger.setLevel(logging.WARNING)
    if _verbose_handler is not None:
        _logger.removeHandler(_verbose_handler)
        _verbose_handler = None
