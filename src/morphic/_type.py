"""Type descriptors for runtime values"""

__all__ = [
    "Kind",
    "Type",
    "FieldDef",
    "type_of",
    "type_from",
    "conforms",
    "is_zero_data",
    "struct_type",
    "slice_of",
    "array_of",
    "map_of",
    "pointer_to",
    "optional_of",
    "chan_of",
    "bool_",
    "int_",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "float32",
    "float64",
    "string",
    "bytes_",
    "bytearray_",
    "time",
    "duration",
    "any_",
    "func",
    "ZERO_TIME",
]

import collections.abc
import dataclasses
import datetime
import enum
import queue
import types
import typing

from . import _error, _ref, _value


class Kind(enum.Enum):
    """Coarse classification of a type."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    TIME = "time"
    STRUCT = "struct"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    POINTER = "pointer"
    INTERFACE = "interface"
    FUNC = "func"
    CHAN = "chan"
    OTHER = "other"

    def __str__(self):
        return self.value


NILABLE_KINDS = frozenset(
    (Kind.POINTER, Kind.INTERFACE, Kind.MAP, Kind.SLICE, Kind.CHAN, Kind.FUNC))
NUMERIC_KINDS = frozenset((Kind.INT, Kind.UINT, Kind.FLOAT))
ITERABLE_KINDS = frozenset(
    (Kind.ARRAY, Kind.CHAN, Kind.MAP, Kind.SLICE, Kind.STRING))

ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=datetime.timezone.utc)

_BASE_ZERO = {Kind.INT: 0, Kind.UINT: 0, Kind.FLOAT: 0.0, Kind.STRING: ""}


class Type:
    """Descriptor for the type of a runtime value.

    Types are immutable and compare by value, so two descriptors built
    separately for `list[int]` are equal. Record types are identified by
    their dataclass.

    Args:
        name: (str) Type name, as understood by `parse_type` for builtins
        kind: (Kind) Classification
        elem: (Type | None) Element, value or pointee type
        key: (Type | None) Map key type
        length: (int | None) Length of fixed arrays
        bits: (int | None) Width of numeric types
        pytype: (type | None) Python class of the values

    Attributes:
        name: (str) Type name
        kind: (Kind) Classification
        elem: (Type | None) Element, value or pointee type
        key: (Type | None) Map key type
        length: (int | None) Length of fixed arrays
        bits: (int | None) Width of numeric types
        pytype: (type | None) Python class of the values
    """

    __slots__ = ("name", "kind", "elem", "key", "length", "bits", "pytype", "_fields")

    def __init__(self, name, kind, *, elem=None, key=None, length=None, bits=None, pytype=None):
        self.name = name
        self.kind = kind
        self.elem = elem
        self.key = key
        self.length = length
        self.bits = bits
        self.pytype = pytype
        self._fields = None

    def _ident(self):
        return (self.name, self.kind, self.elem, self.key, self.length, self.bits, self.pytype)

    def __eq__(self, other):
        if not isinstance(other, Type):
            return NotImplemented
        return self is other or self._ident() == other._ident()

    def __hash__(self):
        return hash(self._ident())

    def __repr__(self):
        return f"Type<{self.name}>"

    def __str__(self):
        return self.name

    @property
    def fields(self):
        """(list[FieldDef]) Fields of a record type, empty for other kinds."""
        if self.kind is not Kind.STRUCT:
            return []
        if self._fields is None:
            # Resolved on first use so records can reference themselves
            try:
                hints = typing.get_type_hints(self.pytype)
            except NameError:
                hints = {}
            fields = []
            for field in dataclasses.fields(self.pytype):
                annotation = hints.get(field.name, field.type)
                if isinstance(annotation, str):
                    annotation = typing.Any
                try:
                    typ = type_from(annotation)
                except _error.InvalidValueError:
                    # Annotations like set[int] hold data of any shape
                    typ = any_
                fields.append(FieldDef(field.name, typ))
            self._fields = fields
        return self._fields

    def field(self, name):
        """Look up a record field definition.

        Args:
            name: (str) Field name

        Returns:
            (FieldDef | None) The field, or None if there is none by that name
        """
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def zero(self):
        """Create the zero value for this type.

        Nil-able kinds have None as zero value. Records are built from the
        zero values of their fields, which runs the dataclass constructor.
        Use `is_zero_data` to check for zero values.

        Returns:
            (object) Zero value

        Raises:
            InvalidValueError: If the record constructor rejects the zero
                field values
        """
        match self.kind:
            case Kind.BOOL:
                return False
            case Kind.INT | Kind.UINT | Kind.FLOAT | Kind.STRING:
                try:
                    return self.pytype()
                except (TypeError, ValueError):
                    # Enums without a default member
                    return _BASE_ZERO[self.kind]
            case Kind.TIME:
                return ZERO_TIME
            case Kind.STRUCT:
                fields = {f.name: f for f in dataclasses.fields(self.pytype)}
                kwargs = {}
                for fielddef in self.fields:
                    if fields[fielddef.name].init:
                        kwargs[fielddef.name] = fielddef.type.zero()
                try:
                    return self.pytype(**kwargs)
                except Exception as err:
                    raise _error.InvalidValueError(f"cannot build a zero {self}: {err}") from err
            case Kind.ARRAY:
                return tuple(self.elem.zero() for _ in range(self.length))
            case Kind.OTHER:
                try:
                    return self.pytype()
                except (TypeError, ValueError):
                    return None
        return None

    @property
    def nilable(self):
        """(bool) Values of this type can be nil."""
        return self.kind in NILABLE_KINDS

    @property
    def optional(self):
        """(bool) Type is an inline optional rather than a reference."""
        return self.kind is Kind.POINTER and self.name.startswith("optional[")

    @property
    def numeric(self):
        """(bool) Type is an integer or floating point type."""
        return self.kind in NUMERIC_KINDS


class FieldDef:
    """Field definition within a record type.

    Args:
        name: (str) Field name
        type: (Type) Field type

    Attributes:
        name: (str) Field name
        type: (Type) Field type
    """

    __slots__ = ("name", "type")

    def __init__(self, name, type):
        self.name = name
        self.type = type

    def __repr__(self):
        return f"FieldDef<{self.name}: {self.type}>"


bool_ = Type("bool", Kind.BOOL, pytype=bool)
int_ = Type("int", Kind.INT, bits=64, pytype=int)
int8 = Type("int8", Kind.INT, bits=8, pytype=int)
int16 = Type("int16", Kind.INT, bits=16, pytype=int)
int32 = Type("int32", Kind.INT, bits=32, pytype=int)
int64 = Type("int64", Kind.INT, bits=64, pytype=int)
uint = Type("uint", Kind.UINT, bits=64, pytype=int)
uint8 = Type("uint8", Kind.UINT, bits=8, pytype=int)
uint16 = Type("uint16", Kind.UINT, bits=16, pytype=int)
uint32 = Type("uint32", Kind.UINT, bits=32, pytype=int)
uint64 = Type("uint64", Kind.UINT, bits=64, pytype=int)
float32 = Type("float32", Kind.FLOAT, bits=32, pytype=float)
float64 = Type("float64", Kind.FLOAT, bits=64, pytype=float)
string = Type("string", Kind.STRING, pytype=str)
bytes_ = Type("bytes", Kind.SLICE, elem=uint8, pytype=bytes)
bytearray_ = Type("bytearray", Kind.SLICE, elem=uint8, pytype=bytearray)
time = Type("time", Kind.TIME, pytype=datetime.datetime)
duration = Type("duration", Kind.INT, bits=64, pytype=datetime.timedelta)
any_ = Type("any", Kind.INTERFACE)
func = Type("func", Kind.FUNC)

NAMED_TYPES = {
    t.name: t for t in (
        bool_, int_, int8, int16, int32, int64, uint, uint8, uint16, uint32,
        uint64, float32, float64, string, bytes_, bytearray_, time, duration,
        any_, func,
    )
}

# Exact python classes of plain values
_CLASS_TYPES = {
    bool: bool_,
    int: int_,
    float: float64,
    str: string,
    bytes: bytes_,
    bytearray: bytearray_,
    datetime.datetime: time,
    datetime.timedelta: duration,
}

_struct_types = {}


def slice_of(elem):
    """(Type) Growable sequence of `elem`."""
    return Type(f"list[{elem}]", Kind.SLICE, elem=elem, pytype=list)


def array_of(elem, length):
    """(Type) Fixed sequence of `length` items of `elem`."""
    return Type(f"array[{elem}, {length}]", Kind.ARRAY, elem=elem, length=length, pytype=tuple)


def map_of(key, elem):
    """(Type) Mapping from `key` to `elem`."""
    return Type(f"dict[{key}, {elem}]", Kind.MAP, elem=elem, key=key, pytype=dict)


def pointer_to(elem):
    """(Type) Reference to an `elem` value."""
    return Type(f"ref[{elem}]", Kind.POINTER, elem=elem)


def optional_of(elem):
    """(Type) Optional `elem` value, stored inline where it is held."""
    return Type(f"optional[{elem}]", Kind.POINTER, elem=elem)


def chan_of(elem):
    """(Type) Queue of `elem` values."""
    return Type(f"chan[{elem}]", Kind.CHAN, elem=elem, pytype=queue.Queue)


def struct_type(cls):
    """Get the record type of a dataclass.

    Args:
        cls: (type) Dataclass

    Returns:
        (Type) Record type

    Raises:
        InvalidValueError: If cls is not a dataclass
    """
    typ = _struct_types.get(cls)
    if typ is None:
        if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
            raise _error.InvalidValueError(f"not a dataclass: {cls!r}")
        typ = Type(cls.__qualname__, Kind.STRUCT, pytype=cls)
        _struct_types[cls] = typ
    return typ


def _common_type(items):
    """Shared type of all items, or `any` when they differ."""
    found = None
    for item in items:
        typ = type_of(item)
        if typ is None:
            return any_
        if found is None:
            found = typ
        elif typ != found:
            return any_
    return found or any_


def type_of(obj):
    """Infer the type of a python value.

    Containers infer their element type from their contents and fall back
    to `any` for empty or mixed containers.

    Args:
        obj: (object) Any python value or Value

    Returns:
        (Type | None) Inferred type, None for None
    """
    if obj is None:
        return None
    if isinstance(obj, _value.Value):
        return obj.type
    typ = _CLASS_TYPES.get(type(obj))
    if typ is not None:
        return typ
    if isinstance(obj, _ref.Ref):
        return pointer_to(obj.elem_type)
    if isinstance(obj, list):
        return slice_of(_common_type(obj))
    if isinstance(obj, tuple):
        return array_of(_common_type(obj), len(obj))
    if isinstance(obj, dict):
        return map_of(_common_type(obj.keys()), _common_type(obj.values()))
    if isinstance(obj, queue.Queue):
        return chan_of(any_)
    if isinstance(obj, datetime.datetime):
        return time
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return struct_type(type(obj))
    if isinstance(obj, type) or callable(obj):
        return func
    return type_from(type(obj))


def conforms(obj, typ):
    """Check if raw python data can be stored as a value of a type.

    Inference from data is ambiguous for containers, an empty list is a
    `list[any]` but fits in any list type. Containers conform when all of
    their items conform.

    Args:
        obj: (object) Raw python data
        typ: (Type) Type of the slot

    Returns:
        (bool) True if the data is a valid value of the type
    """
    if typ.kind is Kind.INTERFACE:
        return True
    if obj is None:
        return typ.nilable
    if type_of(obj) == typ:
        return True
    match typ.kind:
        case Kind.SLICE:
            if typ.pytype in (bytes, bytearray):
                return False
            return type(obj) is list and all(conforms(item, typ.elem) for item in obj)
        case Kind.ARRAY:
            return (type(obj) is tuple and len(obj) == typ.length
                    and all(conforms(item, typ.elem) for item in obj))
        case Kind.MAP:
            return type(obj) is dict and all(
                conforms(k, typ.key) and conforms(v, typ.elem) for k, v in obj.items())
        case Kind.POINTER:
            if typ.optional:
                return conforms(obj, typ.elem)
            return isinstance(obj, _ref.Ref) and obj.elem_type == typ.elem
    return False


def is_zero_data(data, typ):
    """Check if raw data is the zero value of a type.

    Nothing is constructed, records are checked field by field and
    arrays item by item. Non-nil references, interfaces and containers
    are never zero. Naive timestamps count as UTC.

    Args:
        data: (object) Raw python data
        typ: (Type) Type of the data

    Returns:
        (bool) True for None and zero values
    """
    if data is None:
        return True
    match typ.kind:
        case Kind.BOOL:
            return data is False
        case Kind.INT | Kind.UINT | Kind.FLOAT:
            if isinstance(data, datetime.timedelta):
                return not data
            return data == 0
        case Kind.STRING:
            return data == ""
        case Kind.TIME:
            if isinstance(data, datetime.datetime) and data.tzinfo is None:
                data = data.replace(tzinfo=datetime.timezone.utc)
            return data == ZERO_TIME
        case Kind.STRUCT:
            return all(is_zero_data(getattr(data, f.name, None), f.type) for f in typ.fields)
        case Kind.ARRAY:
            return isinstance(data, tuple) and all(is_zero_data(item, typ.elem) for item in data)
    return False


def type_from(annotation):
    """Convert a python annotation to a type descriptor.

    Understands builtin classes, dataclasses, `list[X]`, `dict[K, V]`,
    `tuple[X, Y]`, `Optional[X]`, `Ref[X]`, `Any`, `Callable` and
    `queue.Queue`. Type descriptors are returned unchanged.

    Args:
        annotation: (object) Annotation or Type

    Returns:
        (Type) Type descriptor

    Raises:
        InvalidValueError: If the annotation cannot be described
    """
    if isinstance(annotation, Type):
        return annotation
    if annotation is typing.Any or annotation is object:
        return any_
    typ = _CLASS_TYPES.get(annotation)
    if typ is not None:
        return typ

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is not None:
        if origin is list:
            return slice_of(type_from(args[0]) if args else any_)
        if origin is dict:
            if not args:
                return map_of(any_, any_)
            return map_of(type_from(args[0]), type_from(args[1]))
        if origin is tuple:
            if not args or (len(args) == 2 and args[1] is Ellipsis):
                raise _error.InvalidValueError(f"tuple needs a fixed length: {annotation!r}")
            elems = {type_from(a) for a in args}
            elem = elems.pop() if len(elems) == 1 else any_
            return array_of(elem, len(args))
        if origin is typing.Union or origin is types.UnionType:
            options = [a for a in args if a is not type(None)]
            if len(options) == 1 and len(options) != len(args):
                return optional_of(type_from(options[0]))
            return any_
        if origin is _ref.Ref:
            return pointer_to(type_from(args[0]))
        if origin is collections.abc.Callable:
            return func
        if origin is queue.Queue:
            return chan_of(type_from(args[0]) if args else any_)
        raise _error.InvalidValueError(f"unsupported annotation: {annotation!r}")

    if annotation is list:
        return slice_of(any_)
    if annotation is dict:
        return map_of(any_, any_)
    if annotation is _ref.Ref:
        return pointer_to(any_)
    if annotation is collections.abc.Callable or annotation is typing.Callable:
        return func
    if annotation is queue.Queue:
        return chan_of(any_)

    if isinstance(annotation, type):
        if dataclasses.is_dataclass(annotation):
            return struct_type(annotation)
        name = annotation.__qualname__
        if issubclass(annotation, int) and not issubclass(annotation, bool):
            return Type(name, Kind.INT, bits=64, pytype=annotation)
        if issubclass(annotation, float):
            return Type(name, Kind.FLOAT, bits=64, pytype=annotation)
        if issubclass(annotation, str):
            return Type(name, Kind.STRING, pytype=annotation)
        if issubclass(annotation, datetime.datetime):
            return time
        if issubclass(annotation, tuple):
            raise _error.InvalidValueError(f"tuple needs a fixed length: {annotation!r}")
        return Type(name, Kind.OTHER, pytype=annotation)

    raise _error.InvalidValueError(f"unsupported annotation: {annotation!r}")
