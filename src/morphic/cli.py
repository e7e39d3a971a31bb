"""Morphic CLI - convert, compare and inspect values from the shell.

Usage:
    morphic convert VALUE TYPE          # Convert VALUE to TYPE
    morphic compare LEFT OP RIGHT       # Compare two values with OP
    morphic inspect VALUE [--type TYPE] # Show type and predicates

Values are JSON literals. Anything that is not valid JSON is taken as a
plain string, so `morphic convert 22 string` and
`morphic convert yes bool` both work.
"""

__all__ = ["main"]

import argparse
import json
import logging
import sys

import morphic
from morphic import _colorize


def parse_literal(text):
    """Parse a JSON literal, or keep the text as a string."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def render(value):
    """Render a value for output, strings and timestamps without quoting."""
    if value.is_time:
        return morphic.format_time(value.data)
    if value.is_pointer and not value.is_nil and value.type.elem.kind is morphic.Kind.TIME:
        return "&" + morphic.format_time(value.elem().data)
    return value.format()


def emit(text, stream=None):
    stream = stream or sys.stdout
    print(_colorize.colorize(text, stream), file=stream)


def _wrap(text, typename=None):
    data = parse_literal(text)
    if typename is None:
        value = morphic.reflect(data)
    else:
        value = morphic.reflect(data, morphic.parse_type(typename))
    if value is None:
        raise morphic.InvalidValueError("null has no type, pass --type")
    return value


def cmd_convert(args):
    value = _wrap(args.value)
    result = value.convert_to_type(morphic.parse_type(args.type))
    emit(render(result))


def cmd_compare(args):
    result = morphic.compare(parse_literal(args.left), parse_literal(args.right), args.operator)
    emit("\\-g-true" if result else "\\-y-false")


def cmd_inspect(args):
    value = _wrap(args.value, args.type)
    flags = [
        ("nil", value.is_nil),
        ("zero", value.is_zero),
        ("deep_zero", value.is_deep_zero),
        ("empty", value.is_empty),
        ("iterable", value.is_iterable),
        ("numeric", value.is_numeric),
    ]
    emit(f"\\-s-type\\-n-: \\-c-{value.type}")
    emit(f"\\-s-kind\\-n-: {value.kind}")
    emit(f"\\-s-length\\-n-: {value.length}")
    for name, flag in flags:
        emit(f"\\-s-{name}\\-n-: {'true' if flag else 'false'}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="morphic",
        description="Convert, compare and inspect values")
    parser.add_argument("--verbose", "-v", action="store_true",
        help="Log conversion and comparison details")
    commands = parser.add_subparsers(dest="command", required=True)

    convert = commands.add_parser("convert", help="Convert a value to a type")
    convert.add_argument("value", help="JSON literal or plain string")
    convert.add_argument("type", help="Type expression like int8 or list[string]")
    convert.set_defaults(func=cmd_convert)

    compare = commands.add_parser("compare", help="Compare two values")
    compare.add_argument("left", help="JSON literal or plain string")
    compare.add_argument("operator", metavar="op",
        help="One of: " + " ".join(morphic.OPERATORS))
    compare.add_argument("right", help="JSON literal or plain string")
    compare.set_defaults(func=cmd_compare)

    inspect = commands.add_parser("inspect", help="Show the type and predicates of a value")
    inspect.add_argument("value", help="JSON literal or plain string")
    inspect.add_argument("--type",
        help="Type expression to wrap the value with instead of inferring it")
    inspect.set_defaults(func=cmd_inspect)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        args.func(args)
    except morphic.MorphError as err:
        emit(f"\\-r-error[{err.kind}]\\-n-: {err.message}", sys.stderr)
        return 1
    return 0
