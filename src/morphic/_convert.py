"""Conversion engine.

Conversion is an ordered list of special cases, the first one that
applies wins:

    1. identity
    2. list to list with a different item type, item by item
    3. value to a reference of its own type
    4. reference to its pointee type
    5. string to timestamp (or reference to timestamp)
    6. string to bool ("y", "yes", "1" and "n", "no", "0")
    7. anything to string
    8. string to number
    9. generic fallback

The fallback handles numeric narrowing and widening, durations, named
types of the same kind, records with identical fields and retyping of
containers. Any failure inside it is reported as UnconvertibleError.
"""

__all__ = ["convert", "TRUE_WORDS", "FALSE_WORDS"]

import datetime
import logging
import math
import struct

from . import _error, _ref, _time, _type, _value


logger = logging.getLogger(__name__)

TRUE_WORDS = frozenset(("y", "yes", "1"))
FALSE_WORDS = frozenset(("n", "no", "0"))


def convert(value, target):
    """Convert a value to a target type.

    Args:
        value: (Value | object) Value to convert, raw values are wrapped
        target: (Type) Target type

    Returns:
        (Value) New value of the target type, or the value itself when it
        already has the target type

    Raises:
        InvalidValueError: For None values and nil references
        InvalidTimeError: For strings that are not RFC3339 timestamps
        TypeMismatchError: When an item of a list cannot be converted
        UnconvertibleError: When no rule converts the value
    """
    value = _value.reflect(value)
    if value is None:
        raise _error.InvalidValueError("cannot convert None")
    source = value.type

    if source == target:
        return value

    if source.kind is _type.Kind.SLICE and target.kind is _type.Kind.SLICE and source.elem != target.elem:
        return _convert_items(value, target)

    if target.kind is _type.Kind.POINTER and target.elem == source:
        return _point(value.data, target)

    if value.is_pointer and target.kind is not _type.Kind.POINTER and source.elem == target:
        inner = value.elem()
        if inner is None:
            raise _error.InvalidValueError("nil pointer")
        return _value.Value(inner.data, target)

    if value.is_string and _is_time_target(target):
        moment = _time.parse_time(value.data)
        if target.kind is _type.Kind.TIME:
            return _value.Value(moment, target)
        return _point(moment, target)

    if value.is_string and target.kind is _type.Kind.BOOL:
        word = value.data.strip().lower()
        if word in TRUE_WORDS:
            return _value.Value(True, target)
        if word in FALSE_WORDS:
            return _value.Value(False, target)

    if target.kind is _type.Kind.STRING:
        return _value.Value(_construct(target, _to_text(value.data)), target)

    if value.is_string and target.numeric:
        return _value.Value(_parse_number(value.data, target), target)

    try:
        data = _fallback(value, target)
    except _error.MorphError:
        raise
    except Exception as err:
        logger.debug("Conversion of %s to %s failed: %s", source, target, err)
        raise _error.UnconvertibleError(f"cannot convert {source} to {target}: {err}") from err
    return _value.Value(data, target)


def _is_time_target(target):
    if target.kind is _type.Kind.TIME:
        return True
    return target.kind is _type.Kind.POINTER and target.elem.kind is _type.Kind.TIME


def _point(data, target):
    """Wrap data in a new reference, or inline for optional targets."""
    if target.optional:
        return _value.Value(data, target)
    return _value.Value(_ref.Ref(data, target.elem), target)


def _convert_items(value, target):
    """Convert a list item by item to another item type."""
    elem = target.elem
    items = []
    for index, data in enumerate(value.data or ()):
        item = _value.wrap_slot(data, value.type.elem)
        if item.is_interface or (item.is_pointer and elem.kind is not _type.Kind.POINTER):
            item = item.elem()
        if item is None:
            raise _error.TypeMismatchError(f"item {index}: cannot convert nil to {elem}")
        try:
            items.append(convert(item, elem).data)
        except _error.MorphError as err:
            raise _error.TypeMismatchError(f"item {index}: {err}") from err

    if target.pytype in (bytes, bytearray):
        return _value.Value(target.pytype(items), target)
    return _value.Value(items, target)


def _to_text(data):
    """Render data as text for a string conversion."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    if isinstance(data, (bool, int, float)) or type(data).__str__ is object.__str__:
        return _value.format_data(data)
    return _value.safe_str(data)


def _construct(target, data):
    """Build an instance of a named type, like an enum member."""
    if target.pytype is None or type(data) is target.pytype:
        return data
    try:
        return target.pytype(data)
    except (TypeError, ValueError) as err:
        raise _error.UnconvertibleError(f"{data!r} is not a valid {target}") from err


def _parse_number(text, target):
    """Parse text as a float and cast it to a numeric type."""
    if text != text.strip() or "_" in text:
        raise _error.UnconvertibleError(f"invalid number syntax: {text!r}")
    try:
        number = float(text)
    except ValueError as err:
        raise _error.UnconvertibleError(f"invalid number syntax: {err}") from err
    if math.isinf(number) and text.lstrip("+-").lower() not in ("inf", "infinity"):
        raise _error.UnconvertibleError(f"number out of range: {text!r}")
    return cast_number(number, target)


def cast_number(number, target):
    """Cast a number to a numeric type.

    Integers wrap around modulo 2**bits, two's complement for signed types.
    Floats are truncated toward zero when cast to integers. float32 rounds
    to single precision and becomes infinite past its range.

    Args:
        number: (int | float) Number to cast
        target: (Type) Numeric target type

    Returns:
        (object) Instance of the target type

    Raises:
        UnconvertibleError: For NaN and infinity cast to integers, and
            numbers too large for floats
    """
    if target.kind is _type.Kind.FLOAT:
        try:
            number = float(number)
        except OverflowError as err:
            raise _error.UnconvertibleError(f"{number} is out of float range") from err
        if target.bits == 32:
            number = _round_float32(number)
        return _construct(target, number)

    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            raise _error.UnconvertibleError(f"cannot convert {number} to {target}")
        number = int(number)
    bits = target.bits or 64
    number &= (1 << bits) - 1
    if target.kind is _type.Kind.INT and number >= 1 << (bits - 1):
        number -= 1 << bits

    if target.pytype is datetime.timedelta:
        return _duration(number)
    return _construct(target, number)


def _round_float32(number):
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _duration(nanos):
    """timedelta from nanoseconds, truncated toward zero."""
    micros = abs(nanos) // 1000
    if nanos < 0:
        micros = -micros
    return datetime.timedelta(microseconds=micros)


def _fallback(value, target):
    """Conversions between representations of the same kind of data."""
    source = value.type
    data = value.data

    if source.kind is _type.Kind.INTERFACE:
        inner = value.elem()
        if inner is None:
            raise _error.UnconvertibleError(f"cannot convert nil {source} to {target}")
        return convert(inner, target).data

    if target.kind is _type.Kind.INTERFACE:
        return data

    if source.numeric and target.numeric:
        if isinstance(data, datetime.timedelta):
            data = _time.duration_nanos(data)
        return cast_number(data, target)

    match (source.kind, target.kind):
        case (_type.Kind.BOOL, _type.Kind.BOOL) | (_type.Kind.TIME, _type.Kind.TIME):
            return data
        case (_type.Kind.STRING, _type.Kind.SLICE) if target.elem == _type.uint8:
            return target.pytype(data.encode("utf-8"))
        case (_type.Kind.SLICE, _type.Kind.SLICE):
            # Same item type, different container
            return None if data is None else target.pytype(data)
        case (_type.Kind.ARRAY, _type.Kind.ARRAY) if source.elem == target.elem:
            if source.length != target.length:
                raise _error.UnconvertibleError(f"array length differs: {source} to {target}")
            return data
        case (_type.Kind.MAP, _type.Kind.MAP) if (source.key, source.elem) == (target.key, target.elem):
            return None if data is None else dict(data)
        case (_type.Kind.STRUCT, _type.Kind.STRUCT):
            return _convert_record(data, source, target)

    logger.debug("No conversion rule from %s to %s", source, target)
    raise _error.UnconvertibleError(f"cannot convert {source} to {target}")


def _convert_record(data, source, target):
    """Copy a record into another record class with identical fields."""
    theirs = [(f.name, f.type) for f in source.fields]
    ours = [(f.name, f.type) for f in target.fields]
    if theirs != ours:
        raise _error.UnconvertibleError(f"record fields differ: {source} to {target}")
    kwargs = {name: getattr(data, name) for name, _ in ours}
    return target.pytype(**kwargs)
