"""Tests for value comparisons."""

import datetime

import pytest

import morphic


STAMP = "2012-05-23T18:30:00.000-05:00"


@pytest.mark.parametrize("left,op,right,expected", [
    (3, "=", 3, True),
    (3, "==", 3, True),
    (3, "!=", 4, True),
    (3, "<", 4, True),
    (4, "<", 3, False),
    (3, "<=", 3, True),
    (5, ">", 4, True),
    (5, ">=", 6, False),
    (2.5, ">", 2, True),
    (1, "=", 1.0, True),
    ("10", "<", 20, True),
    ("abc", "<", "abd", True),
    ("abc", "=", "abc", True),
    ("abc", "!=", "abc", False),
    ("hello world", "like", "lo w", True),
    ("hello world", "like", "xyz", False),
    ("count 5", "like", "5", True),
])
def test_operators(left, op, right, expected):
    """Operators apply to numbers and strings."""
    assert bool(morphic.compare(left, right, op)) is expected


def test_unsigned_operand():
    """Numeric strings compare with unsigned numbers."""
    right = morphic.reflect(20, morphic.uint)
    assert morphic.compare("10", right, "<")


def test_result():
    """Results report the applied operator."""
    result = morphic.compare(1, 1, "==")
    assert result.matched is True
    assert result.operator == "="
    assert repr(result) == "CompareResult(True, '=')"


def test_compare_to():
    """Values compare with the same rules."""
    assert morphic.reflect(3).compare_to(4, "<")


class TestErrors:
    """Rejected comparisons."""

    @pytest.mark.parametrize("op", ["<>", "in", "", "=~"])
    def test_unknown_operator(self, op):
        """Only the fixed set of operators is accepted."""
        with pytest.raises(morphic.UnknownOperatorError):
            morphic.compare(1, 2, op)

    def test_like_numbers(self):
        """like is for strings."""
        with pytest.raises(morphic.InvalidComparisonError):
            morphic.compare(5, 3, "like")

    def test_unconvertible_operand(self):
        """Operands that are not numbers fail numeric comparisons."""
        with pytest.raises(morphic.InvalidComparisonError):
            morphic.compare([1], 22, "=")
        with pytest.raises(morphic.InvalidComparisonError) as err:
            morphic.compare("abc", 5, "<")
        assert "conversion error" in err.value.message

    def test_unordered(self):
        """Containers have no ordering."""
        with pytest.raises(morphic.InvalidComparisonError) as err:
            morphic.compare({"a": 10}, {"a": 20}, "<")
        assert err.value.kind == "invalid_comparison"


class TestZero:
    """Zero operands become 0.0."""

    def test_none_left(self):
        """None on the left is zero."""
        assert morphic.compare(None, 3, "<")

    def test_zero_right_swaps(self):
        """A zero right operand moves the left operand to the right."""
        assert morphic.compare(5, 0, "<")
        assert morphic.compare(5, None, "<")
        assert not morphic.compare(5, 0, ">")

    def test_both_zero(self):
        """Two zero operands are equal."""
        assert morphic.compare(0, 0, "=")
        assert morphic.compare("", None, "=")

    def test_deep_zero(self):
        """References to zero count as zero."""
        assert morphic.compare(morphic.Ref(0), 5, "<")


class TestDeep:
    """Operands behind references and of other kinds."""

    def test_reflexive(self):
        """Non-zero values equal themselves."""
        for obj in (1, 2.5, "x", {"a": 1}, [1, 2], morphic.Ref(3)):
            assert morphic.compare(obj, obj, "=")

    @pytest.mark.parametrize("op,expected", [
        ("=", True), ("<=", True), (">=", True),
        ("!=", False), ("<", False), (">", False),
    ])
    def test_reflexive_operators(self, op, expected):
        """Every operator treats a non-zero value like itself."""
        for obj in (1, 2.5, -3, "x", morphic.Ref(3), morphic.parse_time(STAMP)):
            assert bool(morphic.compare(obj, obj, op)) is expected

    @pytest.mark.parametrize("left,right", [
        (1, 1.0),
        ("10", 10),
        (morphic.Ref(3), 3),
        ({"a": 1}, {"a": 1}),
        ("abc", "abd"),
        (2, "2.0"),
        (1, 2),
    ])
    def test_symmetric_equality(self, left, right):
        """Equality does not depend on operand order."""
        assert bool(morphic.compare(left, right, "=")) == bool(morphic.compare(right, left, "="))

    def test_bool_string_order(self):
        """The left operand picks the conversion, so bool and string depend on order."""
        assert morphic.compare(True, "yes", "=")
        assert not morphic.compare("yes", True, "=")

    def test_maps(self):
        """Maps compare by equality only."""
        assert morphic.compare({"a": 10}, {"a": 20}, "!=")
        assert morphic.compare({"a": 10}, {"a": 10}, "=")

    def test_references(self):
        """References are followed."""
        assert morphic.compare(morphic.Ref(3), 3, "=")
        assert morphic.compare(2, morphic.Ref(3), "<")

    def test_interfaces(self):
        """Interfaces are followed."""
        assert morphic.compare(morphic.reflect(3, morphic.any_), 3, "=")

    def test_times(self):
        """Timestamps compare in time order."""
        early = morphic.parse_time(STAMP)
        late = early + datetime.timedelta(hours=1)
        assert morphic.compare(early, morphic.Ref(late), "<")
        assert morphic.compare(late, early, ">")
        assert morphic.compare(early, early.astimezone(datetime.timezone.utc), "=")

    def test_durations(self):
        """Durations compare by length."""
        assert morphic.compare(datetime.timedelta(seconds=1), datetime.timedelta(seconds=2), "<")
        assert morphic.compare(datetime.timedelta(microseconds=1), 1000, "=")

    def test_booleans(self):
        """Booleans compare by equality."""
        assert morphic.compare(True, True, "=")
