"""Index access, appending and sorting of slice values"""

__all__ = ["SliceView", "slice_view"]

import functools

from . import _error, _ops, _ref, _struct, _type, _value


class SliceView:
    """Index oriented access to a slice.

    Items of lists and bytearrays are addressable and can be assigned.
    Appending needs a reference to the slice, so only views built from a
    reference (a Ref, or `new`) can grow. A nil slice behind a reference
    is replaced with an empty one.

    Args:
        source: (object | Value) Slice or reference to a slice

    Attributes:
        value: (Value) The value the view was built from
        can_append: (bool) The view was built from a reference

    Raises:
        InvalidValueError: If the source is None or a nil reference
        NotASequenceError: If the source is not a slice
    """

    __slots__ = ("value", "can_append", "_slice")

    def __init__(self, source):
        value = _value.reflect(source)
        if value is None:
            raise _error.InvalidValueError("cannot view None as a slice")
        self.value = value
        self.can_append = False

        if value.is_slice:
            self._slice = value
        elif value.is_pointer and value.type.elem.kind is _type.Kind.SLICE:
            if value.is_nil:
                raise _error.InvalidValueError("cannot view a nil slice reference")
            inner = value.elem()
            if inner.is_nil:
                inner.set(_value.Value(inner.type.pytype(), inner.type))
            self._slice = inner
            self.can_append = True
        else:
            raise _error.NotASequenceError(f"{value.type} is not a slice")

    def __repr__(self):
        return f"SliceView<{self._slice.type}>({self._slice.format()})"

    def __len__(self):
        return self._slice.length

    def __iter__(self):
        return iter(self.items())

    @property
    def data(self):
        """(list | bytes | bytearray | None) The slice itself."""
        return self._slice.data

    @property
    def elem_type(self):
        """(Type) Type of the items."""
        return self._slice.type.elem

    def new(self):
        """Create a new empty appendable view of the same slice type."""
        return SliceView(_value.new(self._slice.type))

    def index(self, i):
        """Get an item.

        Args:
            i: (int) Index

        Returns:
            (Value | None) Item value, None if out of range
        """
        if not 0 <= i < len(self):
            return None
        data = self._slice.data
        location = None
        if isinstance(data, (list, bytearray)):
            location = _ref.Ref.item(data, i, self.elem_type)
        return _value.wrap_slot(data[i], self.elem_type, location)

    def get(self, i, default=None):
        """Raw data of an item, or `default` if out of range."""
        if not 0 <= i < len(self):
            return default
        return self._slice.data[i]

    def set_index(self, i, value, convert=False):
        """Assign an item.

        Args:
            i: (int) Index
            value: (object | Value) New item
            convert: (bool) Allow conversion of mismatched types

        Raises:
            IndexOutOfBoundsError: If the index is out of range
            UnsettableError: If the slice is immutable
            TypeMismatchError: If types differ and convert is false
        """
        item = self.index(i)
        if item is None:
            raise _error.IndexOutOfBoundsError(f"index {i} out of range for length {len(self)}")
        item.set(value, convert)

    def swap(self, i, j):
        """Exchange two items.

        Raises:
            IndexOutOfBoundsError: If either index is out of range
            UnsettableError: If the slice is immutable
        """
        for index in (i, j):
            if not 0 <= index < len(self):
                raise _error.IndexOutOfBoundsError(
                    f"index {index} out of range for length {len(self)}")
        data = self._slice.data
        if not isinstance(data, (list, bytearray)):
            raise _error.UnsettableError(f"cannot swap items of {self._slice.type}")
        data[i], data[j] = data[j], data[i]

    def items(self):
        """(list[Value]) All items, contents of interface items unwrapped."""
        result = []
        for i in range(len(self)):
            item = self.index(i)
            if item.is_interface and not item.is_nil:
                item = item.elem()
            result.append(item)
        return result

    def append(self, *values):
        """Add items to the end of the slice.

        Every value is checked before any of them is added, a failure
        leaves the slice unchanged.

        Args:
            values: (object | Value) New items

        Raises:
            CannotAppendError: If the view was not built from a reference
            TypeMismatchError: If a value does not have the item type
            InvalidValueError: If a value is None
        """
        if not self.can_append:
            raise _error.CannotAppendError(f"cannot append to {self._slice.type} without a reference")
        items = [_value.assign_data(value, self.elem_type, False) for value in values]
        data = self._slice.data
        if isinstance(data, list):
            data.extend(items)
        else:
            self._store(data + self._slice.type.pytype(items))

    def _store(self, data):
        if self._slice.location is None:
            raise _error.UnsettableError(f"cannot modify unaddressable {self._slice.type}")
        self._slice.location.store(data)
        self._slice.data = data

    def _replace(self, items):
        data = self._slice.data
        if isinstance(data, (list, bytearray)):
            data[:] = items
        else:
            self._store(self._slice.type.pytype(items))

    def convert_to(self, example):
        """Convert items to the type of an example item.

        Raises:
            InvalidValueError: If the example is None
        """
        if example is None:
            raise _error.InvalidValueError("cannot convert to the type of None")
        return self.convert_to_type(_type.type_of(example))

    def convert_to_type(self, elem):
        """Convert all items to another type.

        Args:
            elem: (Type | annotation) Item type

        Returns:
            (Value) New list of the item type

        Raises:
            TypeMismatchError: If an item cannot be converted
        """
        target = _type.slice_of(_type.type_from(elem))
        if self._slice.is_nil:
            return _value.Value([], target)
        return self._slice.convert_to_type(target)

    def filter(self, func):
        """Select items with a function.

        Args:
            func: (callable) Called with each item Value, returns truthy
                to keep the item

        Returns:
            (SliceView) New appendable view with the kept items
        """
        result = self.new()
        kept = [self._slice.data[i] for i, item in enumerate(self.items()) if func(item)]
        result._replace(kept)
        return result

    def sort_by(self, less):
        """Sort items in place.

        Args:
            less: (callable) Called with two item Values, returns truthy
                when the first sorts before the second
        """
        self._reorder(self.items(), less)

    def sort_by_field_func(self, field, less):
        """Sort records or maps in place by one of their fields.

        Args:
            field: (str) Field name, or key for maps
            less: (callable) Called with two field Values, or None for
                missing map keys, returns truthy when the first sorts
                before the second

        Raises:
            NotARecordError: If items are not records, references to
                records or maps
            UnknownFieldError: If records have no such field
        """
        items = self.items()
        if not items:
            return
        first = items[0]
        if not (first.is_struct or first.is_struct_pointer or first.is_map):
            raise _error.NotARecordError(
                f"cannot sort {first.type} items by field, need records or maps")
        keys = [_field_of(item, field) for item in items]
        self._reorder(keys, less)

    def sort_by_field(self, field, ascending=True):
        """Sort records or maps in place by comparing one of their fields."""
        operator = "<" if ascending else ">"
        self.sort_by_field_func(field, lambda a, b: _ops.compare(a, b, operator))

    def _reorder(self, keys, less):
        def order(i, j):
            if less(keys[i], keys[j]):
                return -1
            if less(keys[j], keys[i]):
                return 1
            return 0

        indexes = sorted(range(len(keys)), key=functools.cmp_to_key(order))
        data = self._slice.data
        self._replace([data[i] for i in indexes])


def _field_of(item, name):
    """Field of a record item, or entry of a map item."""
    if item.is_map:
        value = item.map_index(name)
    else:
        value = _struct.StructView(item).field(name)
        if value is None:
            raise _error.UnknownFieldError(f"{item.type} has no field {name!r}")
    if value is not None and value.is_interface and not value.is_nil:
        value = value.elem()
    return value


def slice_view(obj):
    """Create a SliceView over a slice or a reference to one."""
    return SliceView(obj)
