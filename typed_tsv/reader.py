"""
Line reading with one-line lookahead for typed-tsv.

``LineReader`` wraps any text stream that has ``readline()`` and hands out
one line at a time with its trailing newline removed.  A line that has
been peeked is held in the reader until it is consumed, so look-ahead
never depends on the stream's own buffering.

The reader never seeks or rewinds.  End of input is a normal result
(``None``); a failing stream raises ``IoError``.
"""

from __future__ import annotations

from typing import TextIO

from typed_tsv.exceptions import IoError


class LineReader:
    """Reads lines from a text stream with one line of lookahead."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._line: str | None = None
        self._available = False
        self._line_number = 0

    @property
    def line_number(self) -> int:
        """1-based number of the last consumed line; 0 before any."""
        return self._line_number

    def consume(self) -> str | None:
        """Return the next line and advance past it, or ``None`` at end of input."""
        if not self._ensure_line():
            return None
        self._available = False
        self._line_number += 1
        return self._line

    def peek(self) -> str | None:
        """Return the next line without advancing, or ``None`` at end of input."""
        if not self._ensure_line():
            return None
        return self._line

    def _ensure_line(self) -> bool:
        """Make sure the next line is held in the buffer.

        Reads from the stream only when no peeked line is pending.
        Returns False on reaching the end of the input.
        """
        if self._available:
            return True

        try:
            raw = self._stream.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise IoError(IoError.UNKNOWN) from exc

        if not raw:
            return False

        self._line = raw[:-1] if raw.endswith("\n") else raw
        self._available = True
        return True
