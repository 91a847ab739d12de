"""
typed-tsv: load delimiter-separated text into typed records.

The record type's own field declarations (count, order and types)
drive parsing; there is no per-column glue code to write.

Public API surface:

- ``load(stream, record_type, options=None, **overrides)`` -- read a
  whole document into a list of records.
- ``LoadOptions`` -- delimiter, header and comment-prefix settings;
  ``load_options()`` / ``save_options()`` read and write them as YAML.
- ``check(pred, message)`` -- raise ``ValidationError`` from a record's
  ``validate()`` method.
- ``register_conversion(T)`` -- customise how fields of type ``T`` are
  parsed; ``Char`` is the single-character field type.
- ``records_to_frame(records)`` -- the loaded records as a DataFrame.

Example::

    from dataclasses import dataclass

    import numpy as np
    import typed_tsv

    @dataclass
    class Entry:
        row: np.uint32
        column: np.uint32
        value: float

    with open("matrix.tsv") as f:
        entries = typed_tsv.load(f, Entry, comment="#")
"""

from __future__ import annotations

from typed_tsv.config import LoadOptions, load_options, save_options
from typed_tsv.conversion import (
    Char,
    conversion_for,
    parse_value,
    register_conversion,
    unregister_conversion,
)
from typed_tsv.exceptions import (
    ConfigValidationError,
    FormatError,
    IoError,
    ParseError,
    RecordTypeError,
    TsvError,
    ValidationError,
)
from typed_tsv.frame import records_to_frame
from typed_tsv.loader import check, load
from typed_tsv.parser import RecordParser
from typed_tsv.reflection import MAX_FIELDS, field_types, record_layout, record_size

__all__ = [
    "load",
    "check",
    "LoadOptions",
    "load_options",
    "save_options",
    "Char",
    "register_conversion",
    "unregister_conversion",
    "conversion_for",
    "parse_value",
    "RecordParser",
    "MAX_FIELDS",
    "record_layout",
    "record_size",
    "field_types",
    "records_to_frame",
    "TsvError",
    "FormatError",
    "ParseError",
    "IoError",
    "ValidationError",
    "ConfigValidationError",
    "RecordTypeError",
]
