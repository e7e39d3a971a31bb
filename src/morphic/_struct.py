"""Field access on record values"""

__all__ = ["StructView", "struct_view"]

from . import _error, _ref, _value


class StructView:
    """Field oriented access to a record.

    Records are dataclass instances. A view built from a reference to a
    record (a Ref, or a Value reached through one) can assign fields,
    unless the dataclass is frozen. Views over plain records are read
    only.

    Args:
        source: (object | Value) Record or reference to a record

    Raises:
        NotARecordError: If the source is None, a nil reference or not a
            record
    """

    __slots__ = ("source", "value")

    def __init__(self, source):
        value = _value.reflect(source)
        if value is None:
            raise _error.NotARecordError("cannot view None as a record")
        self.source = value
        if value.is_struct_pointer:
            value = value.elem()
            if value is None:
                raise _error.NotARecordError("cannot view a nil record reference")
        if not value.is_struct:
            raise _error.NotARecordError(f"{value.type} is not a record")
        self.value = value

    def __repr__(self):
        return f"StructView<{self.type}>({self.value.format()})"

    @property
    def data(self):
        """(object) The record or reference the view was built from."""
        return self.source.data

    @property
    def type(self):
        """(Type) Record type."""
        return self.value.type

    @property
    def addressable(self):
        """(bool) Fields of this record can be assigned."""
        if self.value.location is None:
            return False
        return not self.type.pytype.__dataclass_params__.frozen

    def new(self):
        """Create a view over a new zero record of the same type.

        Returns:
            (StructView) View over a reference to the new record
        """
        return StructView(_value.new(self.type))

    def field(self, name):
        """Get the value of a field.

        Args:
            name: (str) Field name

        Returns:
            (Value | None) Field value, None if there is no such field
        """
        fielddef = self.type.field(name)
        if fielddef is None:
            return None
        return self._wrap(fielddef)

    def fields(self):
        """(dict[str, Value]) All field values, in declaration order."""
        return {f.name: self._wrap(f) for f in self.type.fields}

    def _wrap(self, fielddef):
        record = self.value.data
        location = None
        if self.addressable:
            location = _ref.Ref.attr(record, fielddef.name, fielddef.type)
        return _value.wrap_slot(getattr(record, fielddef.name), fielddef.type, location)

    def has_field(self, name):
        return self.type.field(name) is not None

    def field_value(self, name):
        """Get the raw data of a field.

        Raises:
            UnknownFieldError: If there is no such field
        """
        if not self.has_field(name):
            raise _error.UnknownFieldError(f"{self.type} has no field {name!r}")
        return getattr(self.value.data, name)

    def get(self, name, default=None):
        """Raw data of a field, or `default` if there is no such field."""
        if not self.has_field(name):
            return default
        return getattr(self.value.data, name)

    def set_field(self, name, value, convert=False):
        """Assign a field.

        Args:
            name: (str) Field name
            value: (object | Value) New value
            convert: (bool) Allow conversion of mismatched types

        Raises:
            UnknownFieldError: If there is no such field
            UnsettableError: If the view is read only
            InvalidValueError: If the value is None
            TypeMismatchError: If types differ and convert is false
        """
        field = self.field(name)
        if field is None:
            raise _error.UnknownFieldError(f"{self.type} has no field {name!r}")
        field.set(value, convert)

    def to_dict(self, omit_zero=False, omit_empty=False):
        """Convert the record to a dict, recursing into nested records.

        Zero fields are None unless omitted.

        Args:
            omit_zero: (bool) Leave out fields with zero values
            omit_empty: (bool) Leave out fields with zero values and empty
                containers

        Returns:
            (dict) Field names mapped to field data
        """
        result = {}
        for name, field in self.fields().items():
            if (field.is_struct or field.is_struct_pointer) and not field.is_zero:
                result[name] = StructView(field).to_dict(omit_zero, omit_empty)
                continue
            if omit_empty and field.is_empty:
                continue
            if field.is_zero:
                if not omit_zero:
                    result[name] = None
                continue
            result[name] = field.data
        return result

    def from_dict(self, data, convert=False):
        """Assign fields from a dict.

        Unknown keys and zero values are skipped. Dicts assigned to record
        fields, or references to records, are applied recursively. Nil
        record references are allocated first.

        Args:
            data: (dict) Field names mapped to values
            convert: (bool) Allow conversion of mismatched types

        Raises:
            MorphError: The failure of the first field that could not be
                assigned, with the field name in the message
        """
        for key, raw in data.items():
            field = self.field(key)
            if field is None:
                continue
            value = _value.reflect(raw)
            if value is None or value.is_zero:
                continue
            try:
                if isinstance(raw, dict) and (field.is_struct or field.is_struct_pointer):
                    self._nested(field).from_dict(raw, convert)
                else:
                    field.set(raw, convert)
            except _error.MorphError as err:
                raise type(err)(f"field {key}: {err.message}") from err

    def _nested(self, field):
        """View over a record field, allocating nil references."""
        if field.is_nil:
            elem = field.type.elem
            if field.type.optional:
                field.set(_value.Value(elem.zero(), elem))
            else:
                field.set(_value.new(elem))
        return StructView(field)


def struct_view(obj):
    """Create a StructView over a record or a reference to one."""
    return StructView(obj)
