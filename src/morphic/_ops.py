"""Comparison engine and deep equality.

Comparisons normalize both operands onto a common representation before
applying the operator:

    - a zero operand (nil, or zero through references) becomes 0.0
    - references and interfaces are followed one level
    - timestamps become nanoseconds since the Unix epoch, durations
      become nanoseconds
    - when either side is numeric both are compared as float64
    - when the left side is a string the right side is rendered as a
      string, and `like` checks if it is contained in the left side
    - otherwise only `=` and `!=` are allowed, the right side is
      converted to the type of the left side and compared deeply
"""

__all__ = ["compare", "deep_equal", "CompareResult", "OPERATORS"]

import dataclasses
import datetime
import logging

from . import _convert, _error, _ref, _time, _type, _value


logger = logging.getLogger(__name__)

OPERATORS = ("=", "==", "!=", "<", "<=", ">", ">=", "like")


class CompareResult:
    """Outcome of a comparison.

    Truthy when the comparison matched.

    Args:
        matched: (bool) Comparison outcome
        operator: (str) Operator that was applied, "==" is reported as "="
    """

    __slots__ = ("matched", "operator")

    def __init__(self, matched, operator):
        self.matched = matched
        self.operator = operator

    def __bool__(self):
        return self.matched

    def __repr__(self):
        return f"CompareResult({self.matched}, {self.operator!r})"


def compare(left, right, operator):
    """Compare two values with an operator.

    Operands of any type can be passed, both raw python values and Values.
    None counts as zero.

    Zero substitution is not symmetric: when the right operand is zero
    it becomes the left operand 0.0 and the original left operand moves
    to the right. `compare(5, 0, "<")` is therefore true.

    Args:
        left: (object | Value) Left operand
        right: (object | Value) Right operand
        operator: (str) One of "=", "==", "!=", "<", "<=", ">", ">=", "like"

    Returns:
        (CompareResult) Outcome and applied operator

    Raises:
        UnknownOperatorError: If the operator is not supported
        InvalidComparisonError: If the operands cannot be compared with
            the operator
    """
    match operator:
        case "=" | "!=" | "<" | "<=" | ">" | ">=" | "like":
            pass
        case "==":
            operator = "="
        case _:
            raise _error.UnknownOperatorError(f"unknown operator {operator!r}")

    a = _value.reflect(left)
    if a is None or a.is_deep_zero:
        a = _value.Value(0.0, _type.float64)
    a = _follow(a)

    b = _value.reflect(right)
    if b is None or b.is_deep_zero:
        a, b = _value.Value(0.0, _type.float64), a
    b = _follow(b)

    a = _reduce(a)
    b = _reduce(b)

    if a.is_numeric or b.is_numeric:
        x = _convert_operand(a, _type.float64)
        y = _convert_operand(b, _type.float64)
        if operator == "like":
            raise _error.InvalidComparisonError("like can only be used for strings, not numbers")
        return CompareResult(_apply(operator, x, y), operator)

    if a.is_string:
        text = _convert_operand(b, _type.string)
        if operator == "like":
            return CompareResult(text in a.data, operator)
        return CompareResult(_apply(operator, str(a.data), text), operator)

    if operator in ("=", "!="):
        other = _value.Value(_convert_operand(b, a.type), a.type)
        matched = a.equals(other)
        return CompareResult(matched if operator == "=" else not matched, operator)

    msg = (f"cannot compare {a.kind} (value {a.format()}) "
           f"to {b.kind} (value {b.format()}) with {operator}")
    logger.debug("Comparison failed: %s", msg)
    raise _error.InvalidComparisonError(msg)


def _follow(value):
    """Follow a non-nil reference or interface one level."""
    if value.is_pointer or value.is_interface:
        inner = value.elem()
        if inner is not None:
            return inner
    return value


def _reduce(value):
    """Timestamps and durations as plain numbers."""
    if value.is_time:
        return _value.Value(float(_time.unix_nanos(value.data)), _type.float64)
    if isinstance(value.data, datetime.timedelta):
        return _value.Value(_time.duration_nanos(value.data), _type.int64)
    return value


def _convert_operand(value, target):
    try:
        return _convert.convert(value, target).data
    except _error.MorphError as err:
        logger.debug("Comparison operand conversion failed: %s", err)
        raise _error.InvalidComparisonError(f"conversion error: {err}") from err


def _apply(operator, x, y):
    match operator:
        case "=":
            return x == y
        case "!=":
            return x != y
        case "<":
            return x < y
        case "<=":
            return x <= y
        case ">":
            return x > y
        case ">=":
            return x >= y
    raise _error.InternalError(f"Unhandled operator: {operator}")


def deep_equal(left, right):
    """Structural equality of two python values.

    Python types must match exactly, so 22 does not equal 22.0. Lists,
    tuples, dicts and dataclasses compare their contents recursively,
    references compare the values they point to.

    Args:
        left: (object) Left value
        right: (object) Right value

    Returns:
        (bool) True if the values are deeply equal
    """
    if left is right:
        return True
    if type(left) is not type(right):
        return False
    if isinstance(left, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(deep_equal(l, r) for l, r in zip(left, right))
    if isinstance(left, dict):
        if left.keys() != right.keys():
            return False
        return all(deep_equal(value, right[key]) for key, value in left.items())
    if isinstance(left, _ref.Ref):
        return left == right or deep_equal(left.load(), right.load())
    if dataclasses.is_dataclass(left) and not isinstance(left, type):
        for field in dataclasses.fields(left):
            if not deep_equal(getattr(left, field.name), getattr(right, field.name)):
                return False
        return True
    return left == right
