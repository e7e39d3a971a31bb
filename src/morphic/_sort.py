"""Sort slices of records by a field"""

__all__ = ["sort_struct_slice"]

from . import _error, _ops, _slice, _struct


def sort_struct_slice(items, field, ascending=True):
    """Sort a slice of records in place by one of their fields.

    Unlike `SliceView.sort_by_field` every item is checked up front: all
    must be records (or references to records) with the field, and the
    field of the first item must be comparable with itself.

    Args:
        items: (SliceView | object) Slice view, slice or reference to a slice
        field: (str) Field name
        ascending: (bool) Sort smallest first

    Raises:
        InvalidValueError: If the slice is empty
        NotARecordError: If an item is not a record
        UnknownFieldError: If an item has no such field
        InvalidComparisonError: If the field values cannot be ordered
    """
    if not isinstance(items, _slice.SliceView):
        items = _slice.SliceView(items)
    if len(items) < 1:
        raise _error.InvalidValueError("cannot sort an empty slice")

    fields = []
    for item in items.items():
        value = _struct.StructView(item).field(field)
        if value is None:
            raise _error.UnknownFieldError(f"{item.type} has no field {field!r}")
        fields.append(value)

    operator = "<" if ascending else ">"
    try:
        _ops.compare(fields[0], fields[0], operator)
    except _error.MorphError as err:
        raise _error.InvalidComparisonError(
            f"values of field {field!r} cannot be compared: {err}") from err

    items._reorder(fields, lambda a, b: _ops.compare(a, b, operator))
