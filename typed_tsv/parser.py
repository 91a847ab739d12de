"""
Line/field parsing for typed-tsv.

Splits lines at a single delimiter character and turns them either into
raw text fields (``parse_fields``) or into typed records
(``parse_record``).

Splitting rule: scanning left to right, a field is the text up to the
next delimiter, or the rest of the line when no delimiter remains.  The
delimiter itself belongs to neither field.  An empty line holds no
fields at all, while a delimiter at the very end of a line is followed
by one more (empty) field::

    ""          -> []
    "a"         -> ["a"]
    "a\\tb"      -> ["a", "b"]
    "\\t\\t"      -> ["", "", ""]
    "a\\t"       -> ["a", ""]

Records are parsed field by field in lockstep with the split, so a line
with too few fields fails at the first missing one and a line with
fields left over after the last one fails as "excess fields".  Any input
error raised while a line is being turned into a record is stamped with
that line and its number before it propagates.
"""

from __future__ import annotations

from typing import TextIO, TypeVar

from typed_tsv.exceptions import FormatError, TsvError
from typed_tsv.reader import LineReader
from typed_tsv.reflection import record_layout

R = TypeVar("R")


class FieldSplitter:
    """Hands out the fields of one line, left to right.

    ``remaining`` is ``None`` once the line is used up; an empty string
    means one empty field is still to come.
    """

    def __init__(self, text: str, delimiter: str) -> None:
        self.remaining: str | None = text if text else None
        self._delimiter = delimiter

    def __bool__(self) -> bool:
        return self.remaining is not None

    def next_field(self) -> str:
        """Consume and return the next field.

        Raises:
            FormatError: If the line has no fields left.
        """
        if self.remaining is None:
            raise FormatError(FormatError.MISSING_FIELD)
        token, sep, rest = self.remaining.partition(self._delimiter)
        self.remaining = rest if sep else None
        return token


def split_fields(text: str, delimiter: str) -> list[str]:
    """Split *text* into all of its fields."""
    splitter = FieldSplitter(text, delimiter)
    fields = []
    while splitter:
        fields.append(splitter.next_field())
    return fields


def parse_line(text: str, delimiter: str, record_type: type[R]) -> R:
    """Parse one line of text into a record of *record_type*.

    Raises:
        FormatError: If the line has too few or too many fields.
        ParseError: If a field cannot be converted to its type.
        ValidationError: If a pydantic record rejects its values.
    """
    layout = record_layout(record_type)
    splitter = FieldSplitter(text, delimiter)
    values = [
        convert(splitter.next_field()) for convert in layout.conversions
    ]
    if splitter:
        raise FormatError(FormatError.EXCESS_FIELD)
    return layout.build(values)


class RecordParser:
    """Incrementally reads delimited rows from a text stream."""

    def __init__(self, stream: TextIO, delimiter: str = "\t") -> None:
        self._source = LineReader(stream)
        self._delimiter = delimiter
        self._line: str | None = None

    @property
    def line(self) -> str | None:
        """Content of the last consumed line."""
        return self._line

    @property
    def line_number(self) -> int:
        """1-based number of the last consumed line; 0 before any."""
        return self._source.line_number

    def skip_comment(self, prefix: str | None) -> None:
        """Skip empty lines and lines starting with *prefix*.

        Empty lines are skipped even when *prefix* is ``None`` (disabled).
        """
        while True:
            line = self._source.peek()
            if line is None:
                break
            if line and not (prefix and line.startswith(prefix)):
                break
            self._consume()

    def parse_fields(self, fields: list[str]) -> bool:
        """Split the next line into text fields appended to *fields*.

        Returns:
            True if a line was read, False at end of input.
        """
        line = self._consume()
        if line is None:
            return False
        fields.extend(split_fields(line, self._delimiter))
        return True

    def parse_record(self, record_type: type[R]) -> R | None:
        """Parse the next line as a record of *record_type*.

        Returns:
            The record, or ``None`` at end of input.

        Raises:
            TsvError: Any format, parse or validation problem with the
                line, carrying the line content and line number.
        """
        line = self._consume()
        if line is None:
            return None
        try:
            return parse_line(line, self._delimiter, record_type)
        except TsvError as err:
            self.annotate(err)
            raise

    def annotate(self, err: TsvError) -> None:
        """Stamp *err* with the last consumed line and its number."""
        err.line = self._line
        err.line_number = self._source.line_number

    def _consume(self) -> str | None:
        line = self._source.consume()
        if line is not None:
            self._line = line
        return line
