"""
Structural reflection of record types for typed-tsv.

A record type is a flat aggregate whose declared fields map 1:1, in
order, onto the columns of a line.  ``record_layout(T)`` discovers the
field count and the ordered field types of ``T`` from its own
declaration, resolves one conversion per field, and caches the result.

Supported declarations:
- ``@dataclasses.dataclass`` classes (every field must be an ``__init__``
  parameter, and ``InitVar`` pseudo-fields are rejected).
- ``typing.NamedTuple`` subclasses.
- pydantic ``BaseModel`` subclasses, built through their field aliases
  where set.  Their validators run when the record is built; a
  ``pydantic.ValidationError`` raised there is reported as
  :class:`typed_tsv.exceptions.ValidationError`.

Field annotations are resolved with ``typing.get_type_hints`` so records
declared under ``from __future__ import annotations`` work as well.

Everything that can go wrong with the type itself (not a supported
aggregate, more than ``MAX_FIELDS`` fields, a field type without a
conversion) raises ``RecordTypeError`` here, before any input is read.
"""

from __future__ import annotations

import dataclasses
import functools
import re
import typing
from dataclasses import dataclass
from typing import Any, Callable

import pydantic

from typed_tsv.conversion import Conversion, conversion_for, registry_generation
from typed_tsv.exceptions import RecordTypeError, ValidationError

MAX_FIELDS = 32
"""Widest record type supported."""

_layout_generation = registry_generation()
_INITVAR_PATTERN = re.compile(r"^\s*(?:\w+\.)?InitVar\b")


@dataclass(frozen=True)
class RecordLayout:
    """Field layout of a record type.

    Attributes:
        record_type: The reflected type.
        names: Field names in declaration (= column) order.
        types: Resolved field types, same order.
        conversions: Text -> value conversion per field, same order.
    """
    record_type: type
    names: tuple[str, ...]
    types: tuple[Any, ...]
    conversions: tuple[Conversion, ...]
    _construct: Callable[..., Any] = dataclasses.field(repr=False, compare=False)

    @property
    def size(self) -> int:
        return len(self.names)

    def build(self, values: list[Any]) -> Any:
        """Construct a record from its field values, all at once.

        Raises:
            ValidationError: If a pydantic record's own validators
                reject the values.
        """
        return self._construct(*values)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def record_layout(record_type: type) -> RecordLayout:
    """Discover the field layout of *record_type*.

    Layouts are cached per type until a conversion is registered or
    unregistered, so fields always use the currently active strategy.

    Raises:
        RecordTypeError: If *record_type* is not a supported flat
            aggregate, is wider than ``MAX_FIELDS``, or declares a
            field type that has no conversion.
    """
    global _layout_generation
    generation = registry_generation()
    if generation != _layout_generation:
        _reflect.cache_clear()
        _layout_generation = generation
    return _reflect(record_type)


@functools.lru_cache(maxsize=None)
def _reflect(record_type: type) -> RecordLayout:
    if not isinstance(record_type, type):
        raise RecordTypeError(f"Record type must be a class, got {record_type!r}")

    if _is_namedtuple(record_type):
        names = tuple(record_type._fields)
        hints = _type_hints(record_type)
        construct = _constructor(record_type, names, keywords=False)
    elif dataclasses.is_dataclass(record_type):
        fields = dataclasses.fields(record_type)
        init_vars = _init_vars(record_type)
        if init_vars:
            raise RecordTypeError(
                f"{record_type.__name__} declares InitVar pseudo-fields: "
                f"{init_vars}. Every field must be stored on the record."
            )
        not_init = [f.name for f in fields if not f.init]
        if not_init:
            raise RecordTypeError(
                f"{record_type.__name__} has fields excluded from __init__: "
                f"{not_init}. Every field must be settable from a column."
            )
        names = tuple(f.name for f in fields)
        hints = _type_hints(record_type)
        construct = _constructor(record_type, names)
    elif issubclass(record_type, pydantic.BaseModel):
        names = tuple(record_type.model_fields)
        hints = {
            name: info.annotation
            for name, info in record_type.model_fields.items()
        }
        construct = _constructor(record_type, _pydantic_keys(record_type))
    else:
        raise RecordTypeError(
            f"{record_type.__name__} is not a dataclass, NamedTuple or "
            "pydantic model."
        )

    if len(names) > MAX_FIELDS:
        raise RecordTypeError(
            f"{record_type.__name__} has {len(names)} fields; "
            f"at most {MAX_FIELDS} are supported."
        )

    types = tuple(hints[name] for name in names)
    conversions = []
    for name, field_type in zip(names, types):
        try:
            conversions.append(conversion_for(field_type))
        except RecordTypeError as exc:
            raise RecordTypeError(
                f"{record_type.__name__}.{name}: {exc}"
            ) from exc

    return RecordLayout(
        record_type=record_type,
        names=names,
        types=types,
        conversions=tuple(conversions),
        _construct=construct,
    )


def record_size(record_type: type) -> int:
    """Number of fields in *record_type*."""
    return record_layout(record_type).size


def field_types(record_type: type) -> tuple[Any, ...]:
    """Ordered field types of *record_type*."""
    return record_layout(record_type).types


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _is_namedtuple(record_type: type) -> bool:
    return issubclass(record_type, tuple) and hasattr(record_type, "_fields")


def _init_vars(record_type: type) -> list[str]:
    # dataclasses.fields() hides InitVar pseudo-fields; they are still
    # __init__ parameters, so the columns would not line up.
    init_vars = []
    for name, f in record_type.__dataclass_fields__.items():
        annotation = f.type
        if isinstance(annotation, dataclasses.InitVar) or (
            isinstance(annotation, str) and _INITVAR_PATTERN.match(annotation)
        ):
            init_vars.append(name)
    return init_vars


def _pydantic_keys(model: type[pydantic.BaseModel]) -> tuple[str, ...]:
    """Keys a model accepts on construction: the alias where one is set."""
    keys = []
    for name, info in model.model_fields.items():
        alias = info.validation_alias
        if not isinstance(alias, str):
            alias = info.alias
        keys.append(alias or name)
    return tuple(keys)


def _type_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except NameError as exc:
        raise RecordTypeError(
            f"Cannot resolve field annotations of {record_type.__name__}: {exc}"
        ) from exc


def _constructor(
    record_type: type, names: tuple[str, ...], keywords: bool = True
) -> Callable[..., Any]:
    """Build the one-shot constructor for *record_type*.

    Keyword arguments are used where possible so kw_only dataclass fields
    are filled as well.  Pydantic models and pydantic dataclasses validate
    on construction; their failures become ``ValidationError``.
    """
    def construct(*values: Any) -> Any:
        try:
            if keywords:
                return record_type(**dict(zip(names, values)))
            return record_type(*values)
        except pydantic.ValidationError as exc:
            raise ValidationError(_pydantic_message(exc)) from exc

    return construct


def _pydantic_message(exc: pydantic.ValidationError) -> str:
    """Flatten a pydantic error into one line: ``field: msg; field: msg``."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
