"""
Unit tests for typed_tsv.loader.

Exercises load() end to end on in-memory streams: header handling,
comment skipping, validation hooks, option overrides, and the error
kinds with their line context.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

import numpy as np
import pydantic
import pytest

from typed_tsv.config import LoadOptions
from typed_tsv.conversion import register_conversion, unregister_conversion
from typed_tsv.exceptions import (
    FormatError,
    IoError,
    ParseError,
    RecordTypeError,
    ValidationError,
)
from typed_tsv.loader import check, load, validate

from tests.conftest import LabeledEntry, MatrixEntry


@dataclass
class UpperTriangle:
    """Matrix entry that only accepts the strict upper triangle."""
    row: np.uint32
    column: np.uint32
    value: float

    def validate(self) -> None:
        check(self.row < self.column, "row index must be smaller than column index")
        check(self.value >= 0, "value must be non-negative")


class Pair(NamedTuple):
    key: str
    count: int


class Measurement(pydantic.BaseModel):
    sensor: str
    value: float

    @pydantic.field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if value != value:
            raise ValueError("value must not be NaN")
        return value


class AliasedMeasurement(pydantic.BaseModel):
    sensor_id: str = pydantic.Field(alias="sensorId")
    value: float


class Meters:
    def __init__(self, text: str) -> None:
        self.value = float(text)


@dataclass
class Span:
    length: Meters


@dataclass
class Payment:
    amount: Decimal


class TestLoad:
    """Happy-path behaviour of load()."""

    def test_without_header(self):
        text = "0\t1\t1.23\tID_01\n2\t3\t4.56\tID_23\n"
        records = load(io.StringIO(text), LabeledEntry, header=False)
        assert len(records) == 2
        assert records[0] == LabeledEntry(0, 1, pytest.approx(1.23), "ID_01")
        assert records[1].label == "ID_23"

    def test_with_header(self):
        text = "row\tcolumn\tvalue\n1\t2\t1.23\n"
        records = load(io.StringIO(text), MatrixEntry)
        assert len(records) == 1
        assert (records[0].row, records[0].column) == (1, 2)
        assert records[0].value == pytest.approx(1.23)

    def test_header_only(self):
        assert load(io.StringIO("row\tcolumn\tvalue\n"), MatrixEntry) == []

    def test_empty_input_without_header(self):
        assert load(io.StringIO(""), MatrixEntry, header=False) == []

    def test_header_content_is_not_checked(self):
        """The header may have any number of fields."""
        text = "just one header field\n1\t2\t3\n"
        assert len(load(io.StringIO(text), MatrixEntry)) == 1

    def test_comments_and_blank_lines(self):
        text = (
            "# generated by a tool\n"
            "\n"
            "row\tcolumn\tvalue\n"
            "# first block\n"
            "1\t2\t0.5\n"
            "\n"
            "# second block\n"
            "3\t4\t1.5\n"
            "\n"
        )
        records = load(io.StringIO(text), MatrixEntry, comment="#")
        assert [(r.row, r.column) for r in records] == [(1, 2), (3, 4)]

    def test_blank_lines_skipped_without_comment_prefix(self):
        text = "\n1\t2\t0.5\n\n\n3\t4\t1.5\n"
        records = load(io.StringIO(text), MatrixEntry, header=False)
        assert len(records) == 2

    def test_comment_line_is_never_the_header(self):
        text = "# row\tcolumn\tvalue\nrow\tcolumn\tvalue\n1\t2\t0.5\n"
        records = load(io.StringIO(text), MatrixEntry, comment="#")
        assert len(records) == 1

    def test_options_object(self):
        options = LoadOptions(delimiter=",", header=False, comment="%")
        text = "% csv-ish\n1,2,0.5\n"
        records = load(io.StringIO(text), MatrixEntry, options)
        assert records == [MatrixEntry(1, 2, 0.5)]

    def test_overrides_take_precedence(self):
        options = LoadOptions(delimiter=",", header=True)
        records = load(io.StringIO("1;2;0.5\n"), MatrixEntry, options,
                       delimiter=";", header=False)
        assert len(records) == 1

    def test_invalid_override(self):
        with pytest.raises(pydantic.ValidationError):
            load(io.StringIO(""), MatrixEntry, delimiter="::")

    def test_namedtuple_records(self):
        records = load(io.StringIO("a\t1\nb\t2\n"), Pair, header=False)
        assert records == [Pair("a", 1), Pair("b", 2)]

    def test_pydantic_records(self):
        records = load(io.StringIO("t1\t0.5\n"), Measurement, header=False)
        assert records == [Measurement(sensor="t1", value=0.5)]

    def test_pydantic_aliases(self):
        records = load(io.StringIO("t1\t0.5\n"), AliasedMeasurement, header=False)
        assert records[0].sensor_id == "t1"
        assert records[0].value == 0.5

    def test_conversion_registered_after_first_load(self):
        first = load(io.StringIO("1.5\n"), Span, header=False)
        assert first[0].length.value == 1.5

        @register_conversion(Meters)
        def _with_unit(text: str) -> Meters:
            return Meters(text.removesuffix("m"))

        try:
            second = load(io.StringIO("2m\n"), Span, header=False)
            assert second[0].length.value == 2.0
        finally:
            unregister_conversion(Meters)

        with pytest.raises(ParseError):
            load(io.StringIO("2m\n"), Span, header=False)

    def test_logs_record_count(self, caplog):
        with caplog.at_level(logging.INFO, logger="typed_tsv.loader"):
            load(io.StringIO("h\n1\t2\t3\n"), MatrixEntry)
        assert "Loaded 1 MatrixEntry record(s) from 2 line(s)" in caplog.text


class TestLoadErrors:
    """Failures abort load() and carry line context."""

    def test_missing_header(self):
        with pytest.raises(FormatError) as excinfo:
            load(io.StringIO("# only comments\n\n"), MatrixEntry, comment="#")
        assert excinfo.value.message == FormatError.MISSING_HEADER
        assert excinfo.value.line_number == 0

    def test_missing_field(self):
        with pytest.raises(FormatError) as excinfo:
            load(io.StringIO("1\t2\t3\n123\n"), MatrixEntry, header=False)
        err = excinfo.value
        assert err.message == FormatError.MISSING_FIELD
        assert err.line == "123"
        assert err.line_number == 2

    def test_excess_field(self):
        with pytest.raises(FormatError, match="excess fields"):
            load(io.StringIO("1\t2\t3\t4\n"), MatrixEntry, header=False)

    def test_parse_error(self):
        with pytest.raises(ParseError) as excinfo:
            load(io.StringIO("h\n\n1\t2\tabc\n"), MatrixEntry)
        assert excinfo.value.line_number == 3
        assert excinfo.value.describe() == 'parse error (at line 3): "1\t2\tabc"'

    def test_out_of_range(self):
        with pytest.raises(ParseError) as excinfo:
            load(io.StringIO("1\t99999999999\t0\n"), MatrixEntry, header=False)
        assert excinfo.value.message == ParseError.OUT_OF_RANGE

    def test_fallback_rejects_trailing_space(self):
        with pytest.raises(ParseError) as excinfo:
            load(io.StringIO("1.5 \n"), Payment, header=False)
        assert excinfo.value.message == ParseError.LEFTOVER
        assert excinfo.value.line_number == 1

    def test_io_error(self):
        class Failing(io.StringIO):
            def readline(self, *args):
                raise OSError("device not ready")

        with pytest.raises(IoError):
            load(Failing(), MatrixEntry)

    def test_unsupported_record_type_reads_nothing(self):
        stream = io.StringIO("a\tb\n")
        with pytest.raises(RecordTypeError):
            load(stream, dict)
        assert stream.tell() == 0


class TestValidation:
    """Record self-validation hooks."""

    def test_valid_records_pass(self):
        records = load(io.StringIO("1\t2\t0.5\n0\t9\t0\n"), UpperTriangle,
                       header=False)
        assert len(records) == 2

    def test_rule_violation(self):
        text = "1\t2\t0.5\n5\t3\t1.0\n"
        with pytest.raises(ValidationError) as excinfo:
            load(io.StringIO(text), UpperTriangle, header=False)
        err = excinfo.value
        assert err.message == "row index must be smaller than column index"
        assert err.line == "5\t3\t1.0"
        assert err.line_number == 2

    def test_second_rule(self):
        with pytest.raises(ValidationError, match="non-negative"):
            load(io.StringIO("1\t2\t-1\n"), UpperTriangle, header=False)

    def test_pydantic_validator_carries_line(self):
        with pytest.raises(ValidationError) as excinfo:
            load(io.StringIO("h\nt1\tnan\n"), Measurement)
        assert "must not be NaN" in excinfo.value.message
        assert excinfo.value.line_number == 2

    def test_validate_without_hook_is_noop(self):
        validate(MatrixEntry(1, 2, 3.0))
        validate(Measurement(sensor="x", value=1.0))

    def test_check(self):
        check(True, "never raised")
        with pytest.raises(ValidationError, match="bad value"):
            check(False, "bad value")
