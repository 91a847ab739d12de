"""
Custom exception hierarchy for typed-tsv.

Why a custom hierarchy:
- Callers can catch one input problem (e.g., ParseError vs FormatError)
  without relying on generic ValueError/RuntimeError.
- Every input error carries the offending line and its 1-based line
  number once the parser knows them, so a bad row in a large file can
  be located directly from the message.

Input errors are created with just a message where they are detected
(deep inside a field conversion, say) and stamped with line context
by the record parser before they propagate further.
"""

from __future__ import annotations


class TsvError(Exception):
    """Base exception for all input errors raised while loading a table.

    Attributes:
        message: Short description of the problem.
        line: Verbatim content of the offending line, if known.
        line_number: 1-based line number, or 0 if not known.
    """

    def __init__(
        self,
        message: str,
        line: str | None = None,
        line_number: int = 0,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.line_number = line_number

    def describe(self) -> str:
        """Render the message with the line number and line content appended."""
        text = self.message
        if self.line_number:
            text += f" (at line {self.line_number})"
        if self.line:
            text += f': "{self.line}"'
        return text

    def __str__(self) -> str:
        return self.describe()


class FormatError(TsvError):
    """Raised when a line does not have the expected number of fields,
    or when a required header line is absent."""

    MISSING_HEADER = "header is expected but not seen"
    MISSING_FIELD = "insufficient number of fields"
    EXCESS_FIELD = "excess fields"


class ParseError(TsvError):
    """Raised when a field's text cannot be converted to its type."""

    UNKNOWN = "parse error"
    OUT_OF_RANGE = "value out of range"
    LEFTOVER = "excess character(s) at the end of a field"


class IoError(TsvError):
    """Raised when reading from the input fails for a reason other than
    reaching the end of it."""

    UNKNOWN = "input error"


class ValidationError(TsvError):
    """Raised when a parsed record rejects its own values.

    Record types raise this from their ``validate()`` method, usually
    through :func:`typed_tsv.check`.
    """


class ConfigValidationError(TsvError):
    """Raised when a saved options file is empty or unusable."""


class RecordTypeError(TypeError):
    """Raised when a record type cannot drive parsing.

    This is a programming error, not an input error: the type is not a
    flat dataclass / NamedTuple / pydantic model, has too many fields,
    or declares a field type with no conversion. It is raised before
    any input is read.
    """
