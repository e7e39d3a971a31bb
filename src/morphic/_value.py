"""Runtime value wrapper"""

__all__ = ["Value", "reflect", "new", "format_data"]

import dataclasses

from . import _convert, _error, _ops, _ref, _slice, _struct, _type


class Value:
    """Handle over one runtime value and its type.

    A Value answers questions about the shape of the value it wraps,
    converts it to other types and compares it with other values. None of
    these operations fail with anything but a MorphError.

    Values reached through a reference (a Ref, a field of a record
    reached through a Ref, an item of a list) remember that location and
    are addressable: `set` writes through to it. Everything else is
    read only.

    The type of a Value never changes; converting creates a new Value.

    Args:
        data: The underlying python value
        typ: (Type | annotation | None) Type of the value, inferred from
            the data when not given
        location: (Ref | None) Storage location of the value

    Attributes:
        data: The underlying python value
        type: (Type) Type of the value
        location: (Ref | None) Storage location, None if not addressable
    """

    __slots__ = ("data", "type", "location")

    def __init__(self, data, typ=None, location=None):
        if isinstance(data, Value):
            raise _error.InternalError(f"Value init called with existing Value {data!r}")
        if typ is None:
            typ = _type.type_of(data)
            if typ is None:
                raise _error.InternalError("Value init called with None and no type")
        else:
            typ = _type.type_from(typ)
        if data is None and not (typ.nilable or typ.kind is _type.Kind.OTHER):
            raise _error.InternalError(f"None is not a {typ} value")

        self.data = data
        self.type = typ
        self.location = location

    def __repr__(self):
        return f"Value<{self.type}>({self.format()})"

    def format(self):
        """Render the value as human readable text.

        Returns:
            (str) Text representation, never fails
        """
        return format_data(self.data)

    @property
    def kind(self):
        """(Kind) Classification of the value's type."""
        return self.type.kind

    @property
    def is_pointer(self):
        return self.type.kind is _type.Kind.POINTER

    @property
    def is_string(self):
        return self.type.kind is _type.Kind.STRING

    @property
    def is_slice(self):
        return self.type.kind is _type.Kind.SLICE

    @property
    def is_map(self):
        return self.type.kind is _type.Kind.MAP

    @property
    def is_struct(self):
        return self.type.kind is _type.Kind.STRUCT

    @property
    def is_struct_pointer(self):
        """(bool) Value is a pointer whose pointee type is a record."""
        return self.is_pointer and self.type.elem.kind is _type.Kind.STRUCT

    @property
    def is_interface(self):
        return self.type.kind is _type.Kind.INTERFACE

    @property
    def is_chan(self):
        return self.type.kind is _type.Kind.CHAN

    @property
    def is_func(self):
        return self.type.kind is _type.Kind.FUNC

    @property
    def is_array(self):
        return self.type.kind is _type.Kind.ARRAY

    @property
    def is_bool(self):
        return self.type.kind is _type.Kind.BOOL

    @property
    def is_time(self):
        return self.type.kind is _type.Kind.TIME

    @property
    def is_numeric(self):
        """(bool) Value is any integer or floating point type."""
        return self.type.numeric

    @property
    def is_iterable(self):
        """(bool) Value is an array, chan, map, slice or string."""
        return self.type.kind in _type.ITERABLE_KINDS

    @property
    def length(self):
        """(int) Number of items for iterable values, 0 for anything else."""
        if not self.is_iterable or self.data is None:
            return 0
        if self.is_chan:
            return self.data.qsize()
        return len(self.data)

    @property
    def is_nil(self):
        """(bool) Value has a nil-able type and is nil.

        Types that cannot be nil are never nil.
        """
        return self.type.nilable and self.data is None

    @property
    def is_zero(self):
        """(bool) Value is nil or equal to the zero value of its type.

        Slices, arrays and maps are only zero when nil.
        """
        if self.is_nil:
            return True
        if self.kind in (_type.Kind.SLICE, _type.Kind.ARRAY, _type.Kind.MAP) or self.type.nilable:
            return False
        return _type.is_zero_data(self.data, self.type)

    @property
    def is_deep_zero(self):
        """(bool) Value is zero, or points to or contains a deep zero value."""
        if self.is_zero:
            return True
        if self.is_pointer or self.is_interface:
            inner = self.elem()
            return inner is None or inner.is_deep_zero
        return False

    @property
    def is_empty(self):
        """(bool) Value is zero, or a map, slice, array or chan without items."""
        if self.is_zero:
            return True
        if self.kind in (_type.Kind.MAP, _type.Kind.SLICE, _type.Kind.ARRAY, _type.Kind.CHAN):
            return self.length < 1
        return False

    def elem(self):
        """Get the value a pointer points to, or an interface contains.

        Returns:
            (Value | None) Contained value, None for nil values and for
            kinds that do not hold another value
        """
        if self.is_nil or not (self.is_pointer or self.is_interface):
            return None
        if self.is_interface:
            return reflect(self.data)
        if isinstance(self.data, _ref.Ref):
            return Value(self.data.load(), self.type.elem, self.data)
        # Inline optional lives where the optional lives
        return Value(self.data, self.type.elem, self.location)

    def addr(self):
        """Get a pointer to this value.

        Returns:
            (Value | None) Pointer value, None if not addressable
        """
        if self.location is None:
            return None
        return Value(self.location, _type.pointer_to(self.type))

    def equals(self, other):
        """Deep equality with another value.

        Args:
            other: (object | Value) Raw python value or another Value, which
                must also have the same type

        Returns:
            (bool) True when both hold structurally equal data
        """
        if isinstance(other, Value):
            if other.type != self.type:
                return False
            other = other.data
        return _ops.deep_equal(self.data, other)

    def set(self, value, convert=False):
        """Write a new value to this value's location.

        Values of a different type are rejected unless `convert` is true,
        in which case they go through the conversion engine first.
        Interface slots accept values of any type, optional slots accept
        values of their element type.

        Args:
            value: (object | Value) New value
            convert: (bool) Allow conversion of mismatched types

        Raises:
            UnsettableError: If the value is not addressable
            InvalidValueError: If the new value is None
            TypeMismatchError: If types differ and convert is false
            MorphError: Failures of the conversion
        """
        if self.location is None:
            raise _error.UnsettableError(f"cannot set unaddressable {self.type} value")
        data = assign_data(value, self.type, convert)
        self.location.store(data)
        self.data = data

    def convert_to_type(self, typ):
        """Convert to another type.

        Args:
            typ: (Type | annotation) Target type

        Returns:
            (Value) New value of the target type

        Raises:
            MorphError: If the value cannot be converted
        """
        return _convert.convert(self, _type.type_from(typ))

    def convert_to(self, example):
        """Convert to the type of an example value.

        Args:
            example: (object) Value of the target type

        Returns:
            (Value) New value with the type of the example

        Raises:
            InvalidValueError: If the example is None
            MorphError: If the value cannot be converted
        """
        if example is None:
            raise _error.InvalidValueError("cannot convert to the type of None")
        return self.convert_to_type(_type.type_of(example))

    def compare_to(self, other, operator):
        """Compare with another value, see `compare`."""
        return _ops.compare(self, other, operator)

    def struct(self):
        """Get a record view of this value.

        Returns:
            (StructView) View over the record

        Raises:
            NotARecordError: If the value is not a record or a pointer to one
        """
        return _struct.StructView(self)

    def must_struct(self):
        """Same as `struct`, but failures escalate to InternalError."""
        try:
            return self.struct()
        except _error.MorphError as err:
            raise _error.InternalError(str(err)) from err

    def slice(self):
        """Get a sequence view of this value.

        Returns:
            (SliceView) View over the slice

        Raises:
            NotASequenceError: If the value is not a slice or a pointer to one
            InvalidValueError: For nil slice pointers
        """
        return _slice.SliceView(self)

    def must_slice(self):
        """Same as `slice`, but failures escalate to InternalError."""
        try:
            return self.slice()
        except _error.MorphError as err:
            raise _error.InternalError(str(err)) from err

    def new_slice(self):
        """Create a new empty appendable slice holding this value's type.

        Returns:
            (SliceView) View over the new slice
        """
        return _slice.SliceView(new(_type.slice_of(self.type)))

    def map_index(self, key):
        """Look up a map entry.

        Args:
            key: (object | Value) Map key

        Returns:
            (Value | None) Entry value, None if the key is missing

        Raises:
            NotAMapError: If the value is not a map
        """
        if not self.is_map:
            raise _error.NotAMapError(f"{self.type} is not a map")
        if isinstance(key, Value):
            key = key.data
        if self.data is None:
            return None
        try:
            item = self.data[key]
        except (KeyError, TypeError):
            return None
        return wrap_slot(item, self.type.elem)

    def set_map_key(self, key, value, convert=False):
        """Set a map entry.

        Maps are references, so the map does not need to be addressable.

        Args:
            key: (object | Value) Map key
            value: (object | Value) Entry value
            convert: (bool) Allow conversion of mismatched key and value types

        Raises:
            NotAMapError: If the value is not a map
            InvalidValueError: If the map is nil
            TypeMismatchError: If types differ and convert is false
        """
        if not self.is_map:
            raise _error.NotAMapError(f"{self.type} is not a map")
        if self.data is None:
            raise _error.InvalidValueError("cannot set key on nil map")
        key = assign_data(key, self.type.key, convert)
        value = assign_data(value, self.type.elem, convert)
        self.data[key] = value


def reflect(obj, typ=None):
    """Wrap a python value.

    Args:
        obj: (object) Any python value, or a Value which is returned as-is
        typ: (Type | annotation | None) Type of the value, inferred when
            not given

    Returns:
        (Value | None) The wrapped value, None for None without a type

    Raises:
        InvalidValueError: If None is given with a type that cannot be nil
    """
    if isinstance(obj, Value):
        return obj
    if typ is None:
        if obj is None:
            return None
        return Value(obj)
    typ = _type.type_from(typ)
    if obj is None and not typ.nilable:
        raise _error.InvalidValueError(f"None is not a {typ} value")
    return Value(obj, typ)


def new(typ):
    """Allocate a zero value of a type.

    Args:
        typ: (Type | annotation) Type to allocate

    Returns:
        (Value) Pointer to the new value
    """
    typ = _type.type_from(typ)
    return Value(_ref.Ref(typ.zero(), typ), _type.pointer_to(typ))


def wrap_slot(data, typ, location=None):
    """Wrap the content of a field, item or entry with its declared type.

    A None stored where the declared type cannot be nil is treated as an
    absent optional of that type.
    """
    if data is None and not (typ.nilable or typ.kind is _type.Kind.OTHER):
        typ = _type.optional_of(typ)
    return Value(data, typ, location)


def assign_data(value, typ, convert):
    """Get the data to store for a value in a slot of the given type.

    Args:
        value: (object | Value) New value
        typ: (Type) Type of the slot
        convert: (bool) Allow conversion of mismatched types

    Returns:
        (object) Data to store

    Raises:
        InvalidValueError: If the value is None
        TypeMismatchError: If types differ and convert is false
    """
    if not isinstance(value, Value):
        if value is None:
            raise _error.InvalidValueError(f"cannot assign None to {typ}")
        if _type.conforms(value, typ):
            return value
        value = Value(value)
    if value.type == typ or typ.kind is _type.Kind.INTERFACE:
        return value.data
    if typ.optional and value.type == typ.elem:
        return value.data
    if not convert:
        raise _error.TypeMismatchError(f"cannot assign {value.type} to {typ}")
    return _convert.convert(value, typ).data


def format_data(data):
    """Render python data as human readable text.

    Never fails: a value whose `__str__` raises renders as a marker
    naming its class and the exception.

    Args:
        data: (object) Any python value

    Returns:
        (str) Text representation
    """
    if data is None:
        return "nil"
    if isinstance(data, bool):
        return "true" if data else "false"
    if isinstance(data, float):
        if data.is_integer() and abs(data) < 1e21:
            return str(int(data))
        return repr(data)
    if isinstance(data, str):
        return str.__str__(data)
    if isinstance(data, _ref.Ref):
        try:
            return "&" + format_data(data.load())
        except Exception as err:
            return _failed_text(data, err)
    if isinstance(data, (list, tuple, bytes, bytearray)):
        return "[" + " ".join(format_data(item) for item in data) + "]"
    if isinstance(data, dict):
        items = (f"{format_data(k)}={format_data(v)}" for k, v in data.items())
        return "{" + " ".join(items) + "}"
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        items = (f"{f.name}={format_data(getattr(data, f.name, None))}"
                 for f in dataclasses.fields(data))
        return "{" + " ".join(items) + "}"
    return safe_str(data)


def safe_str(data):
    """(str) `str(data)`, or a failure marker when `__str__` raises."""
    try:
        return str(data)
    except Exception as err:
        return _failed_text(data, err)


def _failed_text(data, err):
    return f"<{type(data).__qualname__}: str failed with {type(err).__name__}>"
