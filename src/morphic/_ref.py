"""References to storage locations"""

__all__ = ["Ref"]

import typing

from . import _type


T = typing.TypeVar("T")


class Ref(typing.Generic[T]):
    """Reference to a storage location.

    A Ref is the address of a value. Calling the constructor allocates a
    fresh cell holding the value. The `attr` and `item` constructors
    refer to an attribute of an object or an item of a container instead,
    so storing through them writes to that object.

    `Ref[X]` can be used in dataclass annotations to declare a pointer
    field.

    Args:
        value: (object) Initial value of the new cell
        typ: (Type | annotation | None) Type of the referenced value,
            inferred from the value when not given

    Attributes:
        elem_type: (Type) Type of the referenced value
    """

    __slots__ = ("elem_type", "_owner", "_key", "_attr")

    def __init__(self, value=None, typ=None):
        if typ is None:
            typ = _type.any_ if value is None else _type.type_of(value)
        self.elem_type = _type.type_from(typ)
        self._owner = [value]
        self._key = 0
        self._attr = False

    @classmethod
    def attr(cls, obj, name, typ):
        """Reference the attribute `name` of `obj`."""
        return cls._bind(obj, name, True, typ)

    @classmethod
    def item(cls, container, key, typ):
        """Reference the item `key` of a list or dict."""
        return cls._bind(container, key, False, typ)

    @classmethod
    def _bind(cls, owner, key, attr, typ):
        ref = cls.__new__(cls)
        ref.elem_type = _type.type_from(typ)
        ref._owner = owner
        ref._key = key
        ref._attr = attr
        return ref

    def load(self):
        """(object) Current value at the location."""
        if self._attr:
            return getattr(self._owner, self._key)
        return self._owner[self._key]

    def store(self, value):
        """Write a value to the location."""
        if self._attr:
            setattr(self._owner, self._key, value)
        else:
            self._owner[self._key] = value

    def __eq__(self, other):
        if not isinstance(other, Ref):
            return NotImplemented
        return (self._owner is other._owner and self._key == other._key
                and self._attr == other._attr)

    def __hash__(self):
        return hash((id(self._owner), self._key, self._attr))

    def __repr__(self):
        return f"Ref<{self.elem_type}>"
