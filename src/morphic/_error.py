"""Error classes and helpers"""

__all__ = [
    "MorphError",
    "InvalidValueError",
    "TypeMismatchError",
    "UnconvertibleError",
    "InvalidTimeError",
    "UnsettableError",
    "NotARecordError",
    "NotASequenceError",
    "NotAMapError",
    "UnknownFieldError",
    "UnknownOperatorError",
    "InvalidComparisonError",
    "IndexOutOfBoundsError",
    "CannotAppendError",
    "InternalError",
]


class MorphError(Exception):
    """Base class for the typed failures of the engine.

    Every subclass carries a short `kind` tag that identifies the failure
    independently of the message text.

    Args:
        message: (str | None) Error description, defaults to the kind tag

    Attributes:
        message: (str) Error description
    """

    kind = "error"

    def __init__(self, message=None):
        self.message = message or self.kind
        super().__init__(self.message)


class InvalidValueError(MorphError):
    """Operation given an absent or unrepresentable value."""

    kind = "invalid_value"


class TypeMismatchError(MorphError):
    """Assignment or element conversion between incompatible types."""

    kind = "type_mismatch"


class UnconvertibleError(MorphError):
    """No conversion rule applied to the value and target type."""

    kind = "unconvertible"


class InvalidTimeError(MorphError):
    """Text is not a timestamp in the RFC3339 profile."""

    kind = "invalid_time"


class UnsettableError(MorphError):
    """Mutation of a value that was not reached through a reference."""

    kind = "unsettable"


class NotARecordError(MorphError):
    """Record access on a value that is not a record."""

    kind = "not_a_record"


class NotASequenceError(MorphError):
    """Sequence access on a value that is not a slice."""

    kind = "not_a_sequence"


class NotAMapError(MorphError):
    """Key access on a value that is not a map."""

    kind = "not_a_map"


class UnknownFieldError(MorphError):
    """Record has no field with the requested name."""

    kind = "unknown_field"


class UnknownOperatorError(MorphError):
    """Comparison operator outside of the supported set."""

    kind = "unknown_operator"


class InvalidComparisonError(MorphError):
    """The two operands have no ordering or equality in common."""

    kind = "invalid_comparison"


class IndexOutOfBoundsError(MorphError):
    """Sequence index beyond the end of the sequence."""

    kind = "index_out_of_bounds"


class CannotAppendError(MorphError):
    """Append on a sequence that was not reached through a reference."""

    kind = "cannot_append_to_non_reference"


class InternalError(RuntimeError):
    """Broken invariant inside the engine, or an escalated `must_*` call.

    Not a MorphError, `except MorphError` handlers do not catch it.
    """
