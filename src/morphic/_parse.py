"""Parse type expressions.

Type expressions use the same syntax as `str(Type)`:

    int8
    list[string]
    dict[string, any]
    ref[time]
    optional[int]
    array[float64, 3]
    chan[bool]

Record types have no expression syntax, use `type_from` with the
dataclass instead.
"""

__all__ = ["parse_type"]

import lark

from . import _error, _type


def parse_type(text):
    """Parse a type expression into a type descriptor.

    Args:
        text: (str) Type expression

    Returns:
        (Type) Parsed type

    Raises:
        InvalidValueError: If the expression is malformed or names an
            unknown type
    """
    parser = _lark_parser("typename")
    try:
        tree = parser.parse(text)
    except lark.exceptions.LarkError as err:
        raise _error.InvalidValueError(f"invalid type expression {text!r}") from err
    return _convert_tree(tree.children[0])


def _convert_tree(tree):
    """Build a Type from a parsed type node."""
    kids = tree.children
    match tree.data:
        case "named":
            name = str(kids[0])
            typ = _type.NAMED_TYPES.get(name)
            if typ is None:
                raise _error.InvalidValueError(f"unknown type name {name!r}")
            return typ
        case "list":
            return _type.slice_of(_convert_tree(kids[0]))
        case "dict":
            return _type.map_of(_convert_tree(kids[0]), _convert_tree(kids[1]))
        case "ref":
            return _type.pointer_to(_convert_tree(kids[0]))
        case "optional":
            return _type.optional_of(_convert_tree(kids[0]))
        case "chan":
            return _type.chan_of(_convert_tree(kids[0]))
        case "array":
            return _type.array_of(_convert_tree(kids[0]), int(kids[1]))
    raise _error.InternalError(f"Unhandled grammar rule: {tree.data}")


_parsers = {}


def _lark_parser(name):
    """Get globally shared lark parser.

    Args:
        name: (str) name of the grammar file (without .lark)

    Returns:
        (lark.Lark) Parser instance
    """
    parser = _parsers.get(name)
    if parser is not None:
        return parser

    path = f"lark/{name}.lark"
    parser = lark.Lark.open(path, rel_to=__file__, parser="lalr")
    _parsers[name] = parser
    return parser
