"""
Record loading for typed-tsv.

``load()`` reads a whole delimited document into a list of records:

1. Skip leading comment and empty lines.
2. If ``options.header`` is set, read one line as plain fields and drop
   it.  A header is required in that case, even though its content is
   never checked.
3. Repeat until the input is used up: skip comment and empty lines,
   parse one line into a record, run the record's ``validate()`` method
   if it has one, append the record.

Any error aborts the load and propagates to the caller with the line
content and line number attached.
"""

from __future__ import annotations

import logging
from typing import Any, TextIO, TypeVar

import pydantic

from typed_tsv.config import LoadOptions
from typed_tsv.exceptions import FormatError, ValidationError
from typed_tsv.parser import RecordParser
from typed_tsv.reflection import record_layout

logger = logging.getLogger(__name__)

R = TypeVar("R")

# pydantic models inherit a deprecated classmethod named validate(); it is
# not a record validation hook.
_PYDANTIC_VALIDATE = getattr(
    getattr(pydantic.BaseModel, "validate", None), "__func__", None
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load(
    stream: TextIO,
    record_type: type[R],
    options: LoadOptions | None = None,
    **overrides: Any,
) -> list[R]:
    """Load every record of *record_type* from a delimited text stream.

    Args:
        stream: Text stream positioned at the start of the table (an open
            file, ``io.StringIO``, ...).  Read line by line to the end.
        record_type: A dataclass, NamedTuple or pydantic model whose
            fields, in order, describe the columns.
        options: Load options.  Defaults to ``LoadOptions()``.
        **overrides: ``delimiter``, ``header`` or ``comment`` to
            override individual options.

    Returns:
        The records in input order.

    Raises:
        RecordTypeError: If *record_type* cannot describe a row.  Raised
            before the stream is read.
        FormatError: If the header is missing or a line has the wrong
            number of fields.
        ParseError: If a field cannot be converted to its type.
        ValidationError: If a record rejects its own values.
        IoError: If reading from the stream fails.

    Example::

        @dataclass
        class Edge:
            row: np.uint32
            column: np.uint32
            value: float

        with open("edges.tsv") as f:
            edges = load(f, Edge, header=False, comment="#")
    """
    if options is None:
        options = LoadOptions()
    if overrides:
        options = LoadOptions.model_validate({**options.model_dump(), **overrides})

    layout = record_layout(record_type)
    logger.debug(
        "Loading %s (%d fields) with %s",
        record_type.__name__, layout.size, options,
    )

    parser = RecordParser(stream, options.delimiter)
    parser.skip_comment(options.comment)

    if options.header:
        header: list[str] = []
        if not parser.parse_fields(header):
            raise FormatError(FormatError.MISSING_HEADER)
        logger.debug("Skipped header at line %d: %s", parser.line_number, header)

    records: list[R] = []
    while True:
        parser.skip_comment(options.comment)
        record = parser.parse_record(record_type)
        if record is None:
            break
        try:
            validate(record)
        except ValidationError as err:
            parser.annotate(err)
            raise
        records.append(record)

    logger.info(
        "Loaded %d %s record(s) from %d line(s)",
        len(records), record_type.__name__, parser.line_number,
    )
    return records


def validate(record: Any) -> None:
    """Run the record's own ``validate()`` method, if it defines one."""
    hook = getattr(type(record), "validate", None)
    if hook is None or not callable(hook):
        return
    inherited = getattr(hook, "__func__", None)
    if inherited is not None and inherited is _PYDANTIC_VALIDATE:
        return
    record.validate()


def check(pred: bool, message: str) -> None:
    """Raise ``ValidationError`` with *message* if *pred* is false.

    Meant for use inside a record's ``validate()`` method::

        @dataclass
        class Edge:
            row: np.uint32
            column: np.uint32
            value: float

            def validate(self) -> None:
                check(self.row < self.column,
                      "row index must be smaller than column index")
                check(self.value >= 0, "value must be non-negative")
    """
    if not pred:
        raise ValidationError(message)
