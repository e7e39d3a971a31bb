"""Tests for the Value wrapper."""

import datetime
import queue

import pytest

import morphic
import morphtest


def test_reflect_none():
    """None without a type is absent."""
    assert morphic.reflect(None) is None


def test_reflect_none_with_type():
    """None is only accepted for types that can be nil."""
    value = morphic.reflect(None, list[int])
    assert value.is_nil
    with pytest.raises(morphic.InvalidValueError):
        morphic.reflect(None, int)


def test_reflect_value_passthrough():
    """Values are not wrapped twice."""
    value = morphic.reflect(5)
    assert morphic.reflect(value) is value


def test_invariants():
    """Broken invariants are internal errors, not morph errors."""
    with pytest.raises(morphic.InternalError):
        morphic.Value(None)
    with pytest.raises(morphic.InternalError):
        morphic.Value(morphic.Value(1))
    with pytest.raises(morphic.InternalError):
        morphic.Value(None, morphic.int_)
    assert not issubclass(morphic.InternalError, morphic.MorphError)


class TestPredicates:
    """Kind predicates."""

    @pytest.mark.parametrize("obj,predicate", [
        (morphic.Ref(1), "is_pointer"),
        ("a", "is_string"),
        ([1], "is_slice"),
        (b"ab", "is_slice"),
        ({"a": 1}, "is_map"),
        (morphtest.Sample(), "is_struct"),
        (morphic.Ref(morphtest.Sample()), "is_struct_pointer"),
        (queue.Queue(), "is_chan"),
        (print, "is_func"),
        ((1, 2), "is_array"),
        (True, "is_bool"),
        (3, "is_numeric"),
        (2.5, "is_numeric"),
        (datetime.datetime(2020, 1, 1), "is_time"),
        ("abc", "is_iterable"),
        ([1], "is_iterable"),
    ])
    def test_predicate(self, obj, predicate):
        """Each value answers its own predicate."""
        assert getattr(morphic.reflect(obj), predicate)

    def test_interface(self):
        """Values wrapped with any are interfaces."""
        assert morphic.reflect(5, morphic.any_).is_interface
        assert not morphic.reflect(5).is_interface

    def test_bool_is_not_numeric(self):
        """Booleans are never numbers."""
        assert not morphic.reflect(True).is_numeric

    def test_length(self):
        """Length counts items of iterables only."""
        assert morphic.reflect("abc").length == 3
        assert morphic.reflect([1, 2]).length == 2
        assert morphic.reflect(5).length == 0
        chan = queue.Queue()
        chan.put(1)
        assert morphic.reflect(chan).length == 1


class TestZero:
    """Nil, zero, deep zero and empty checks."""

    def test_nil(self):
        """Only nil-able kinds are nil."""
        assert morphic.reflect(None, morphic.slice_of(morphic.int_)).is_nil
        assert morphic.reflect(None, morphic.any_).is_nil
        assert not morphic.reflect(0).is_nil
        assert not morphic.reflect([]).is_nil

    @pytest.mark.parametrize("obj", [0, 0.0, "", False, morphic.ZERO_TIME, morphtest.Sample()])
    def test_zero(self, obj):
        """Zero values of their own type."""
        assert morphic.reflect(obj).is_zero

    @pytest.mark.parametrize("obj", [1, "a", True, [], {}, (0, 0), morphtest.Sample(number=1)])
    def test_not_zero(self, obj):
        """Containers are never zero unless nil."""
        assert not morphic.reflect(obj).is_zero

    def test_zero_nil_types(self):
        """Nil values of every nil-able kind are zero."""
        for typ in (morphic.pointer_to(morphic.int_), morphic.any_, morphic.func,
                    morphic.chan_of(morphic.int_), morphic.map_of(morphic.string, morphic.int_)):
            assert morphic.reflect(None, typ).is_zero

    def test_deep_zero(self):
        """References to zero values are deep zero."""
        assert morphic.reflect(morphic.Ref(0)).is_deep_zero
        assert morphic.reflect(morphic.Ref(morphic.Ref(""))).is_deep_zero
        assert morphic.reflect(0, morphic.any_).is_deep_zero
        assert not morphic.reflect(morphic.Ref(0)).is_zero
        assert not morphic.reflect(morphic.Ref(3)).is_deep_zero

    def test_record_not_constructed(self):
        """Records are checked field by field without calling the constructor."""
        value = morphic.reflect(morphtest.Validated("a"))
        assert not value.is_zero
        assert not value.is_deep_zero
        assert morphic.compare(morphtest.Validated("a"), morphtest.Validated("a"), "=")

    def test_record_unresolved_annotation(self):
        """Fields with annotations outside the type model hold any data."""
        assert morphic.struct_type(morphtest.Tagged).field("tags").type == morphic.any_
        assert not morphic.reflect(morphtest.Tagged({1})).is_zero

    def test_record_fields(self):
        """Records are zero when every field is."""
        assert morphic.reflect(morphtest.Nested()).is_zero
        assert not morphic.reflect(morphtest.Nested(inner=morphtest.Sample(name="a"))).is_zero
        assert not morphic.reflect(morphtest.Nested(names=[])).is_zero

    def test_naive_time(self):
        """Naive timestamps count as UTC."""
        assert morphic.reflect(datetime.datetime(1, 1, 1)).is_zero
        assert not morphic.reflect(datetime.datetime(2000, 1, 1)).is_zero

    def test_empty(self):
        """Containers without items are empty."""
        assert morphic.reflect([]).is_empty
        assert morphic.reflect({}).is_empty
        assert morphic.reflect(queue.Queue()).is_empty
        assert morphic.reflect(0).is_empty
        assert not morphic.reflect([0]).is_empty
        assert not morphic.reflect("a").is_empty


class TestIndirection:
    """Dereferencing and addresses."""

    def test_elem_pointer(self):
        """Elem of a reference is addressable."""
        ref = morphic.Ref(5)
        inner = morphic.reflect(ref).elem()
        assert inner.data == 5
        assert inner.type == morphic.int_
        assert inner.addr().data is ref

    def test_elem_nil_and_plain(self):
        """Nil and non-indirect values have no elem."""
        assert morphic.reflect(None, morphic.pointer_to(morphic.int_)).elem() is None
        assert morphic.reflect(5).elem() is None

    def test_elem_interface(self):
        """Elem of an interface is the contained value with its own type."""
        inner = morphic.reflect("x", morphic.any_).elem()
        assert inner.type == morphic.string

    def test_addr_unaddressable(self):
        """Plain values have no address."""
        assert morphic.reflect(5).addr() is None

    def test_optional(self):
        """Optional values are stored inline."""
        value = morphic.reflect(5, morphic.optional_of(morphic.int_))
        assert value.is_pointer
        assert value.elem().data == 5
        assert morphic.reflect(None, morphic.optional_of(morphic.int_)).is_nil


class TestEquals:
    """Deep equality."""

    def test_raw(self):
        """Raw values compare deeply."""
        assert morphic.reflect([1, {"a": 2}]).equals([1, {"a": 2}])
        assert not morphic.reflect([1, {"a": 2}]).equals([1, {"a": 3}])

    def test_exact_types(self):
        """Python types must match."""
        assert morphic.reflect(22).equals(22)
        assert not morphic.reflect(22).equals(22.0)
        assert not morphic.reflect(1).equals(True)

    def test_values(self):
        """Wrapped values must have the same type."""
        assert morphic.reflect(5).equals(morphic.reflect(5))
        assert not morphic.reflect(5).equals(morphic.reflect(5, morphic.int8))

    def test_references(self):
        """References compare what they point to."""
        assert morphic.reflect(morphic.Ref(3)).equals(morphic.Ref(3))
        assert morphic.reflect(morphtest.Sample(1)).equals(morphtest.Sample(1))


class TestSet:
    """Writing through addressable values."""

    def test_set(self):
        """Set writes to the referenced location."""
        ref = morphic.Ref(1)
        value = morphic.reflect(ref).elem()
        value.set(5)
        assert ref.load() == 5
        assert value.data == 5

    def test_unsettable(self):
        """Plain values cannot be set."""
        with pytest.raises(morphic.UnsettableError):
            morphic.reflect(20).set(55)

    def test_none(self):
        """None cannot be assigned."""
        value = morphic.reflect(morphic.Ref(1)).elem()
        with pytest.raises(morphic.InvalidValueError):
            value.set(None)

    def test_mismatch(self):
        """Other types need conversion."""
        ref = morphic.Ref(1)
        value = morphic.reflect(ref).elem()
        with pytest.raises(morphic.TypeMismatchError):
            value.set("7")
        value.set("7", convert=True)
        assert ref.load() == 7

    def test_interface_slot(self):
        """Interface slots accept values of any type."""
        record = morphtest.Nested()
        morphtest.field_of(record, "extra").set([1, 2])
        assert record.extra == [1, 2]

    def test_optional_slot(self):
        """Optional slots accept their element type."""
        record = morphtest.Nested()
        morphtest.field_of(record, "inner_opt").set(morphtest.Sample(3))
        assert record.inner_opt == morphtest.Sample(3)

    def test_conversion_failure(self):
        """Failed conversions leave the location alone."""
        ref = morphic.Ref(1)
        with pytest.raises(morphic.UnconvertibleError):
            morphic.reflect(ref).elem().set([1], convert=True)
        assert ref.load() == 1


class TestMaps:
    """Map entry helpers."""

    def test_set_map_key(self):
        """Entries are written to the map."""
        data = {"x": 22}
        morphic.reflect(data).set_map_key("y", 33)
        assert data["y"] == 33

    def test_set_map_key_convert(self):
        """Entries are converted when asked to."""
        data = {"x": 22}
        value = morphic.reflect(data)
        with pytest.raises(morphic.TypeMismatchError):
            value.set_map_key("y", 55.0)
        value.set_map_key("y", 55.0, convert=True)
        assert data["y"] == 55

    def test_interface_map(self):
        """Maps of any keep the value as given."""
        data = {"x": 22, "y": "a"}
        morphic.reflect(data).set_map_key("z", 11.0, convert=True)
        assert data["z"] == 11.0

    def test_wrong_key(self):
        """Keys that do not convert fail."""
        value = morphic.reflect({1: "a"})
        with pytest.raises(morphic.UnconvertibleError):
            value.set_map_key("z", 11.0, convert=True)

    def test_map_index(self):
        """Entries are looked up by key."""
        value = morphic.reflect({"x": 22})
        assert value.map_index("x").data == 22
        assert value.map_index("missing") is None

    def test_not_a_map(self):
        """Entry helpers need a map."""
        with pytest.raises(morphic.NotAMapError):
            morphic.reflect([1]).map_index(0)
        with pytest.raises(morphic.NotAMapError):
            morphic.reflect(5).set_map_key("a", 1)

    def test_nil_map(self):
        """Nil maps cannot take entries."""
        value = morphic.reflect(None, morphic.map_of(morphic.string, morphic.int_))
        assert value.map_index("a") is None
        with pytest.raises(morphic.InvalidValueError):
            value.set_map_key("a", 1)


class TestViews:
    """Promotion to record and slice views."""

    def test_struct(self):
        """Records and references to records have record views."""
        assert morphic.reflect(morphtest.Sample()).struct().type == morphic.struct_type(morphtest.Sample)
        with pytest.raises(morphic.NotARecordError):
            morphic.reflect(5).struct()

    def test_must_struct(self):
        """must_struct escalates failures."""
        with pytest.raises(morphic.InternalError):
            morphic.reflect(5).must_struct()
        assert morphic.reflect(morphtest.Sample()).must_struct() is not None

    def test_slice(self):
        """Slices have slice views."""
        assert len(morphic.reflect([1, 2]).slice()) == 2
        with pytest.raises(morphic.NotASequenceError):
            morphic.reflect(5).slice()
        with pytest.raises(morphic.InternalError):
            morphic.reflect(5).must_slice()

    def test_new_slice(self):
        """new_slice creates an appendable slice of the value's type."""
        view = morphic.reflect(5).new_slice()
        view.append(1, 2)
        assert view.data == [1, 2]
        assert view.elem_type == morphic.int_


def test_new():
    """new allocates a reference to a zero value."""
    value = morphic.new(morphic.int16)
    assert value.type == morphic.pointer_to(morphic.int16)
    assert value.elem().data == 0


@pytest.mark.parametrize("obj,text", [
    (None, "nil"),
    (True, "true"),
    (2.0, "2"),
    (2.5, "2.5"),
    ("a b", "a b"),
    ([1, 2.5, False, None], "[1 2.5 false nil]"),
    ({"a": 1}, "{a=1}"),
    (morphtest.Sample(1, 2.0, "x"), "{number=1 ratio=2 name=x}"),
])
def test_format_data(obj, text):
    """Human readable rendering never fails."""
    assert morphic.format_data(obj) == text


def test_format_broken_str():
    """Values whose __str__ raises render as a marker."""
    marker = "<Broken: str failed with RuntimeError>"
    assert morphic.format_data(morphtest.Broken()) == marker
    assert morphic.format_data([1, morphtest.Broken()]) == f"[1 {marker}]"


def test_format_reference():
    """References render what they point to."""
    assert morphic.reflect(morphic.Ref(5)).format() == "&5"
