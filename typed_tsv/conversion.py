"""
Per-type text -> value conversions for typed-tsv.

Every field type used in a record resolves to exactly one conversion: a
callable taking the raw field text and returning the typed value, or
raising ``ParseError``.

Resolution order for a field type ``T``:
1. A strategy registered with ``@register_conversion(T)``.
2. A ``__tsv_parse__(cls, text)`` classmethod defined on ``T`` itself.
3. A built-in strategy (integers, floats, bool, ``Char``, ``str``),
   including every numpy fixed-width integer / float scalar type.
4. The generic fallback: ``T(text)``.  Surrounding whitespace is a
   "leftover" error, as for the numeric strategies.

A ``typing.NewType`` without a strategy of its own uses the one of its
supertype.

Annotations that are not plain classes (``list[int]``, unions, ``Any``)
have no strategy and raise ``RecordTypeError``.  Record layouts resolve
their conversions up front, so this happens before any input is read.

Numeric strategies are strict: the whole token must be the number, no
surrounding whitespace, no ``+`` sign, no ``_`` separators.  A valid
number followed by other characters is a "leftover" error, a value that
does not fit the target type is "out of range", anything else is a
generic parse error.
"""

from __future__ import annotations

import logging
import math
import re
import typing
from typing import Any, Callable, NewType

import numpy as np

from typed_tsv.exceptions import ParseError, RecordTypeError

logger = logging.getLogger(__name__)

Conversion = Callable[[str], Any]

Char = NewType("Char", str)
"""A single-character field. The token must be exactly one character."""

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"-?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_BOOL_VALUES = {"0": False, "1": True, "false": False, "true": True}

# Strategies registered by callers; these win over everything else.
_CUSTOM: dict[Any, Conversion] = {}
# Built-in strategies, filled in at the bottom of this module and
# extended lazily for numpy scalar types.
_DEFAULTS: dict[Any, Conversion] = {}
# Bumped whenever _CUSTOM changes so cached record layouts can be dropped.
_generation = 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def register_conversion(field_type: Any) -> Callable[[Conversion], Conversion]:
    """Decorator registering a custom conversion for *field_type*.

    The decorated function receives the raw field text and must return
    a value of *field_type* or raise ``ParseError``.  It fully replaces
    the built-in strategy for that type.

    Example::

        @register_conversion(Rational)
        def _parse_rational(text: str) -> Rational:
            num, sep, den = text.partition("/")
            if not sep:
                raise ParseError(ParseError.UNKNOWN)
            return Rational(parse_value(int, num), parse_value(int, den))
    """
    def decorator(func: Conversion) -> Conversion:
        if field_type in _CUSTOM:
            logger.warning(
                "Replacing conversion for %r: %r -> %r",
                field_type, _CUSTOM[field_type], func,
            )
        _CUSTOM[field_type] = func
        _bump_generation()
        return func

    return decorator


def unregister_conversion(field_type: Any) -> None:
    """Remove a custom conversion, restoring the default for *field_type*."""
    if _CUSTOM.pop(field_type, None) is not None:
        _bump_generation()


def conversion_for(field_type: Any) -> Conversion:
    """Resolve the conversion used for fields annotated with *field_type*.

    Raises:
        RecordTypeError: If *field_type* is not a class that can be
            converted from text.
    """
    if field_type in _CUSTOM:
        return _CUSTOM[field_type]

    hook = getattr(field_type, "__tsv_parse__", None)
    if hook is not None and callable(hook):
        return hook

    if field_type in _DEFAULTS:
        return _DEFAULTS[field_type]

    if isinstance(field_type, NewType):
        return conversion_for(field_type.__supertype__)

    if not _is_plain_class(field_type):
        raise RecordTypeError(
            f"No conversion for field type {field_type!r}. "
            "Use a plain class or register one with register_conversion()."
        )

    if issubclass(field_type, np.integer):
        conversion = _integer_conversion(field_type)
    elif issubclass(field_type, np.floating):
        conversion = _float_conversion(field_type)
    else:
        conversion = _constructor_conversion(field_type)
    _DEFAULTS[field_type] = conversion
    return conversion


def parse_value(field_type: Any, text: str) -> Any:
    """Convert *text* to *field_type* using its resolved conversion."""
    return conversion_for(field_type)(text)


def registry_generation() -> int:
    """Counter that changes every time a custom conversion is (un)registered."""
    return _generation


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _bump_generation() -> None:
    global _generation
    _generation += 1


def _is_plain_class(field_type: Any) -> bool:
    if field_type is Any:
        return False
    if typing.get_origin(field_type) is not None:
        return False
    return isinstance(field_type, type)


def _match_whole(pattern: re.Pattern[str], text: str) -> str:
    """Return the numeric prefix of *text*, insisting that it is all of *text*."""
    match = pattern.match(text)
    if match is None:
        raise ParseError(ParseError.UNKNOWN)
    if match.end() != len(text):
        raise ParseError(ParseError.LEFTOVER)
    return match.group()


def _parse_int(text: str) -> int:
    digits = _match_whole(_INTEGER_PATTERN, text)
    try:
        return int(digits)
    except ValueError as exc:
        # Exceeds the interpreter's int-from-string digit limit.
        raise ParseError(ParseError.OUT_OF_RANGE) from exc


def _parse_float(text: str) -> float:
    number = _match_whole(_FLOAT_PATTERN, text)
    value = float(number)
    if math.isinf(value) and "inf" not in number.lower():
        raise ParseError(ParseError.OUT_OF_RANGE)
    return value


def _integer_conversion(scalar_type: type[np.integer]) -> Conversion:
    """Build a range-checked conversion for a fixed-width numpy integer."""
    info = np.iinfo(scalar_type)
    low, high = int(info.min), int(info.max)

    def convert(text: str) -> np.integer:
        value = _parse_int(text)
        if value < low or value > high:
            raise ParseError(ParseError.OUT_OF_RANGE)
        return scalar_type(value)

    return convert


def _float_conversion(scalar_type: type[np.floating]) -> Conversion:
    """Build a range-checked conversion for a numpy floating type."""
    limit = float(np.finfo(scalar_type).max)

    def convert(text: str) -> np.floating:
        value = _parse_float(text)
        if math.isfinite(value) and abs(value) > limit:
            raise ParseError(ParseError.OUT_OF_RANGE)
        return scalar_type(value)

    return convert


def _constructor_conversion(field_type: type) -> Conversion:
    """Fallback: build the value by calling the type with the token text."""
    def convert(text: str) -> Any:
        if text != text.strip():
            raise ParseError(ParseError.LEFTOVER)
        try:
            return field_type(text)
        except (ValueError, TypeError, ArithmeticError) as exc:
            raise ParseError(ParseError.UNKNOWN) from exc

    return convert


def _parse_bool(text: str) -> bool:
    try:
        return _BOOL_VALUES[text]
    except KeyError:
        raise ParseError(ParseError.UNKNOWN) from None


def _parse_char(text: str) -> str:
    if len(text) != 1:
        raise ParseError(ParseError.UNKNOWN)
    return Char(text)


def _parse_str(text: str) -> str:
    return text


_DEFAULTS.update({
    int: _parse_int,
    float: _parse_float,
    bool: _parse_bool,
    str: _parse_str,
    Char: _parse_char,
    np.bool_: lambda text: np.bool_(_parse_bool(text)),
})
